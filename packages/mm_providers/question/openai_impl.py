import time
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from .base import QuestionGenerator, QuestionGenerationResult


class OpenAIQuestionGenerator(QuestionGenerator):
    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini", client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def generate_questions(self, context: Dict[str, Any]) -> QuestionGenerationResult:
        prompt = (
            "Prepare questions for a job interview.\n"
            f"Job role: {context.get('role')}\n"
            f"Experience level: {context.get('level')}\n"
            f"Tech stack: {context.get('techstack')}\n"
            f"Focus on: {context.get('type')} (behavioural/technical)\n"
            f"Number of questions: {context.get('amount')}\n\n"
            'Return ONLY a valid JSON array of strings like: ["Question 1", "Question 2"]\n'
            "No extra text. No explanations."
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            return QuestionGenerationResult("", {}, False, f"Question generation failed: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            return QuestionGenerationResult("", {}, False, "Empty response from question model")

        return QuestionGenerationResult(
            content=content,
            metadata={"model": self.model, "timestamp": time.time()},
            success=True,
        )
