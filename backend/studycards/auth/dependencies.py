"""FastAPI dependencies for the caller's identity.

Authentication itself happens upstream (API gateway / identity provider); this
service only trusts the owner id it forwards in the ``X-User-Id`` header.
"""

from fastapi import Header, HTTPException, status
from pydantic import BaseModel


class CurrentUser(BaseModel):
    """The learner on whose behalf a request is made."""

    user_id: str


async def get_current_user(
    x_user_id: str | None = Header(None, description="Owner ID forwarded by the auth layer"),
) -> CurrentUser:
    """Return the current user, or 401 when no owner id was forwarded."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return CurrentUser(user_id=x_user_id.strip())
