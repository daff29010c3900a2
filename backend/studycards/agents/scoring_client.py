"""Foundry Agent Framework client used as the AI answer scorer."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from typing import TYPE_CHECKING, Any

from studycards.agents.prompts import SCORING_INSTRUCTIONS, PresentationMode, build_scoring_prompt

if TYPE_CHECKING:
    from agent_framework import ChatAgent

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """Raised when the scoring agent fails or returns unusable output."""

    pass


class FoundryScoringClient:
    """AI grading collaborator backed by the Azure OpenAI Responses API.

    Each call makes a single attempt bounded by a timeout. Every failure is
    raised as ScoringError (or the underlying transport error); callers are
    expected to fall back to the local grader.
    """

    ENV_ENDPOINT = "AZURE_OPENAI_ENDPOINT"
    ENV_DEPLOYMENT = "AZURE_OPENAI_RESPONSES_DEPLOYMENT_NAME"
    ENV_API_VERSION = "AZURE_OPENAI_API_VERSION"
    ENV_TIMEOUT = "AI_SCORING_TIMEOUT_SECONDS"

    DEFAULT_TIMEOUT_SECONDS = 15.0

    def __init__(self):
        """Read configuration from the environment.

        Raises EnvironmentError if required variables are not set.
        """
        self._endpoint = os.environ.get(self.ENV_ENDPOINT)
        self._deployment = os.environ.get(self.ENV_DEPLOYMENT)
        # Agent Framework Azure Responses client currently requires api_version="preview"
        self._api_version = os.environ.get(self.ENV_API_VERSION, "preview")
        self._timeout = self._read_timeout()

        if not self._endpoint:
            raise EnvironmentError(f"Missing required environment variable: {self.ENV_ENDPOINT}")
        if not self._deployment:
            raise EnvironmentError(f"Missing required environment variable: {self.ENV_DEPLOYMENT}")

    @classmethod
    def _read_timeout(cls) -> float:
        raw = os.environ.get(cls.ENV_TIMEOUT)
        if raw is None or not raw.strip():
            return cls.DEFAULT_TIMEOUT_SECONDS
        try:
            timeout = float(raw)
        except ValueError:
            raise EnvironmentError(f"{cls.ENV_TIMEOUT} must be a number of seconds, got {raw!r}")
        if not 0 < timeout < float("inf"):
            raise EnvironmentError(f"{cls.ENV_TIMEOUT} must be a positive number of seconds, got {raw!r}")
        return timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_agent(self) -> "ChatAgent":
        # Lazy import to allow testing without agent-framework installed
        from agent_framework.azure import AzureOpenAIResponsesClient
        from azure.identity import DefaultAzureCredential

        client = AzureOpenAIResponsesClient(
            endpoint=self._endpoint,
            deployment_name=self._deployment,
            api_version=self._api_version,
            credential=DefaultAzureCredential(),
        )
        return client.create_agent(
            name="ScoringAgent",
            instructions=SCORING_INSTRUCTIONS,
        )

    async def score(
        self,
        question: str,
        expected: str,
        submitted: str,
        presentation_mode: PresentationMode,
    ) -> dict[str, Any]:
        """Ask the agent to grade one answer and return its raw JSON verdict."""
        prompt = build_scoring_prompt(question, expected, submitted, presentation_mode)
        agent = self._get_agent()

        try:
            raw_response = await asyncio.wait_for(agent.run(prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise ScoringError(f"Scoring agent timed out after {self._timeout:g}s")

        return parse_verdict(response_text(raw_response))


def response_text(raw_response: object) -> str:
    """Extract the text payload from an agent response object."""
    if isinstance(raw_response, str):
        return raw_response

    for attr in ("text", "output_text", "content"):
        value = getattr(raw_response, attr, None)
        if isinstance(value, str) and value.strip():
            return value

    return str(raw_response)


_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_BARE_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_verdict(text: str) -> dict[str, Any]:
    """Parse the agent's JSON verdict.

    Accepts a bare JSON object, one inside a markdown code block, or one embedded
    in surrounding prose.

    Raises:
        ScoringError: If no JSON object can be recovered.
    """
    text = text.strip()
    candidates = [text]
    for pattern in (_FENCED_JSON_RE, _BARE_JSON_RE):
        match = pattern.search(text)
        if match:
            candidates.append(match.group(1) if match.groups() else match.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.warning(f"No JSON verdict found in scoring response: {text[:200]}")
    raise ScoringError("Could not parse scoring response")


# Singleton instance
_scoring_client: FoundryScoringClient | None = None


def get_scoring_client() -> FoundryScoringClient:
    """Get the singleton scoring client.

    Raises EnvironmentError if required config is missing.
    """
    global _scoring_client
    if _scoring_client is None:
        _scoring_client = FoundryScoringClient()
    return _scoring_client


def reset_scoring_client() -> None:
    """Reset the scoring client (for testing)."""
    global _scoring_client
    _scoring_client = None
