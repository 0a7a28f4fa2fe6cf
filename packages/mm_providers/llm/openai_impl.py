import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from packages.mm_core.errors import ScoringError

from .base import IScoringProvider

logger = logging.getLogger("mockmate.providers.scoring")

SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Provide structured, strict scoring. Respond with a single JSON object only."
)


def build_scoring_prompt(rendered_transcript: str, rubric: List[str]) -> str:
    categories = "\n".join(f"- {name}" for name in rubric)
    return (
        "You are an AI interviewer analyzing a mock interview. Be strict.\n\n"
        f"Transcript:\n{rendered_transcript}\n"
        "Score the candidate 0-100 for each category, in this exact order:\n"
        f"{categories}\n\n"
        "JSON fields:\n"
        '  "totalScore": int 0-100,\n'
        '  "categoryScores": [{"name": string, "score": int 0-100, "comment": string}],\n'
        '  "strengths": [string],\n'
        '  "areasForImprovement": [string],\n'
        '  "finalAssessment": string'
    )


class OpenAIScoringProvider(IScoringProvider):
    """Transcript-to-score function backed by an OpenAI chat model in JSON mode."""
    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini", client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def score(self, rendered_transcript: str, rubric: List[str]) -> Dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_scoring_prompt(rendered_transcript, rubric)},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
        except OpenAIError as e:
            raise ScoringError(f"Scoring backend request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ScoringError("Scoring backend returned an empty response")

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable scoring output: {content[:200]}")
            raise ScoringError("Scoring output is not valid JSON") from e

        if not isinstance(parsed, dict):
            raise ScoringError(f"Scoring output must be an object, got {type(parsed).__name__}")
        return parsed
