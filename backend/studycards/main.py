import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studycards.agents import get_scoring_client
from studycards.db import close_client, ensure_cards_container, get_settings, verify_connection
from studycards.routers import cards_router, review_router

load_dotenv()

logger = logging.getLogger(__name__)

API_NAME = "Study Cards API"
API_VERSION = "1.0.0"


def _check_card_store() -> None:
    settings = get_settings()
    if not settings.is_configured():
        logger.warning("Cosmos DB not configured (set COSMOS_ENDPOINT or COSMOS_EMULATOR=true)")
        return

    if settings.auto_create:
        ensure_cards_container()

    if verify_connection():
        logger.info("Connected to Cosmos DB database %s", settings.database_name)
    else:
        logger.error("Failed to connect to Cosmos DB - check configuration")


def _check_ai_scoring() -> bool:
    try:
        get_scoring_client()
    except EnvironmentError as e:
        logger.warning(f"AI scoring not configured - typed answers use the local grader: {e}")
        return False
    logger.info("AI scoring enabled for typed answers")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    _check_card_store()
    _check_ai_scoring()

    yield

    close_client()
    logger.info("Cosmos DB connection closed")


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title=API_NAME,
    description="Spaced-repetition flashcard scheduling and answer grading",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cards_router)
app.include_router(review_router)


@app.get("/")
async def root():
    """API name, version and the main entry points."""
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "endpoints": {
            "health": "/healthz",
            "cards": "/cards",
            "review": "/review/next",
            "dueCount": "/review/due-count",
            "learning": "/review/learning",
        },
    }


@app.get("/healthz")
async def healthz():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
