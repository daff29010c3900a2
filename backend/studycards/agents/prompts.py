"""Prompts for the answer-scoring agent."""

from typing import Literal

PresentationMode = Literal["recognition", "recall"]

SCORING_INSTRUCTIONS = (
    "You are an educational assessment assistant that grades flashcard answers "
    "fairly and consistently. Always respond with a single JSON object and nothing else."
)

_MODE_DESCRIPTIONS: dict[str, str] = {
    "recognition": "The learner saw the term and had to produce its definition.",
    "recall": "The learner saw the definition and had to produce the term.",
}

_QUALITY_SCALE = """Quality scale:
- 0 (Again): wrong, or no understanding shown
- 1 (Hard): partially correct, with significant errors or missing key information
- 2 (Good): mostly correct, minor errors or imprecision
- 3 (Easy): complete and accurate"""

_GUIDELINES = """Guidelines:
- Judge meaning, not exact wording; accept synonyms and paraphrases
- Ignore minor spelling and grammar mistakes
- Give partial credit to answers that capture the essential idea"""

_RESPONSE_FORMAT = """Respond with ONLY this JSON object:
{"quality": <integer 0-3>, "reasoning": "<one sentence>", "confidence": <number 0.0-1.0>, "isCorrect": <true|false>}"""


def describe_mode(presentation_mode: PresentationMode) -> str:
    """Describe the review direction for the prompt.

    Raises:
        ValueError: If the presentation mode is unknown
    """
    if presentation_mode not in _MODE_DESCRIPTIONS:
        raise ValueError(f"Unsupported presentation mode: {presentation_mode}")
    return _MODE_DESCRIPTIONS[presentation_mode]


def build_scoring_prompt(
    question: str,
    expected: str,
    submitted: str,
    presentation_mode: PresentationMode,
) -> str:
    """Build the user message asking the agent to grade one answer."""
    return "\n\n".join(
        [
            _QUALITY_SCALE,
            (
                f"Context: {describe_mode(presentation_mode)}\n"
                f'Question: "{question}"\n'
                f'Correct answer: "{expected}"\n'
                f'Learner\'s answer: "{submitted}"'
            ),
            _GUIDELINES,
            _RESPONSE_FORMAT,
        ]
    )
