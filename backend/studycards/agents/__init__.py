"""Agent Framework integration for AI answer scoring."""

from .prompts import build_scoring_prompt, describe_mode
from .scoring_client import (
    FoundryScoringClient,
    ScoringError,
    get_scoring_client,
    parse_verdict,
    reset_scoring_client,
    response_text,
)

__all__ = [
    "build_scoring_prompt",
    "describe_mode",
    "FoundryScoringClient",
    "ScoringError",
    "get_scoring_client",
    "parse_verdict",
    "reset_scoring_client",
    "response_text",
]
