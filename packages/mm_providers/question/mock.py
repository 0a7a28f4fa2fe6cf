import asyncio
import json
import time

from .base import QuestionGenerator, QuestionGenerationResult


class MockQuestionGenerator(QuestionGenerator):
    """
    Mock implementation for local runs and tests.
    Simulates latency, failure and raw (possibly fenced) model output.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0, raw_output: str = None):
        self.should_fail = should_fail
        self.latency = latency
        self.raw_output = raw_output

    async def generate_questions(self, context: dict) -> QuestionGenerationResult:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            return QuestionGenerationResult("", {}, False, "Mock Failure: Intentional Error")

        if self.raw_output is not None:
            content = self.raw_output
        else:
            role = context.get("role", "Unknown role")
            amount = int(context.get("amount") or 1)
            content = json.dumps(
                [f"Question {i + 1} about working as a {role}?" for i in range(amount)]
            )

        return QuestionGenerationResult(
            content=content,
            metadata={"model": "mock-gpt", "timestamp": time.time()},
            success=True,
        )
