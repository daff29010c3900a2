"""Cards API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from studycards.auth import CurrentUser, get_current_user
from studycards.models import CardCreate, CardListResponse, CardResponse, CardUpdate
from studycards.repositories import CardNotFoundError, get_card_repository

router = APIRouter(prefix="/cards", tags=["cards"])


def _not_found(card_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Card with ID {card_id} not found",
    )


@router.get("", response_model=CardListResponse)
async def list_cards(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CardListResponse:
    """List all cards of the current user, newest first."""
    cards = get_card_repository().list_by_user(user.user_id)
    return CardListResponse(
        cards=[CardResponse.from_card(card) for card in cards],
        count=len(cards),
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]) -> CardResponse:
    """Get a specific card by ID."""
    try:
        card = get_card_repository().get_by_id(card_id, user.user_id)
    except CardNotFoundError:
        raise _not_found(card_id)
    return CardResponse.from_card(card)


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    card_create: CardCreate, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> CardResponse:
    """Create a new card. New cards start in the learning phase and are due immediately."""
    card = get_card_repository().create(user.user_id, card_create)
    return CardResponse.from_card(card)


@router.put("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: str,
    card_update: CardUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardResponse:
    """Update a card's content."""
    try:
        card = get_card_repository().update(card_id, user.user_id, card_update)
    except CardNotFoundError:
        raise _not_found(card_id)
    return CardResponse.from_card(card)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]) -> None:
    """Delete a card."""
    try:
        get_card_repository().delete(card_id, user.user_id)
    except CardNotFoundError:
        raise _not_found(card_id)
