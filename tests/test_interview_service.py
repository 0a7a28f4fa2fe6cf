import unittest

from packages.mm_auth.resolver import User
from packages.mm_core.errors import GenerationError, NotFoundError, ValidationError
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_feedback.schema import validate_assessment
from packages.mm_interview.models import INTERVIEW_COVERS
from packages.mm_interview.service import InterviewService, parse_questions
from packages.mm_providers.question.mock import MockQuestionGenerator
from packages.mm_store.memory_store import MemoryDocumentStore
from packages.mm_providers.llm.mock import MockScoringProvider


class TestParseQuestions(unittest.TestCase):
    def test_plain_array(self):
        self.assertEqual(parse_questions('["A?", "B?"]'), ["A?", "B?"])

    def test_fenced_array(self):
        raw = '```json\n["What is a closure?", "Explain the GIL"]\n```'
        self.assertEqual(parse_questions(raw), ["What is a closure?", "Explain the GIL"])

    def test_wrapping_quotes(self):
        self.assertEqual(parse_questions('"["Q1"]"'), ["Q1"])

    def test_invalid_json(self):
        with self.assertRaises(GenerationError):
            parse_questions("Here are your questions: 1. ...")

    def test_not_a_string_array(self):
        with self.assertRaises(GenerationError):
            parse_questions('{"questions": ["Q1"]}')
        with self.assertRaises(GenerationError):
            parse_questions("[1, 2]")


class TestInterviewService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryDocumentStore()
        self.feedback_repo = FeedbackRepository(self.store)
        self.service = InterviewService(self.store, MockQuestionGenerator(), self.feedback_repo)
        self.alice = User(id="alice", name="Alice")

    async def test_01_generate_persists_finalized_interview(self):
        """Scenario: generation succeeds -> finalized interview with a cover"""
        interview = await self.service.generate("alice", "Backend", "Junior", "python,django", "technical", 3)

        self.assertEqual(len(interview.questions), 3)
        self.assertEqual(interview.techstack, ["python", "django"])
        doc = self.store.get("interviews", interview.id)
        self.assertTrue(doc["finalized"])
        self.assertEqual(doc["userId"], "alice")
        self.assertIn(doc["coverImage"], INTERVIEW_COVERS)
        self.assertIn("createdAt", doc)

    async def test_02_generation_failure(self):
        """Scenario: generator fails -> GenerationError, nothing stored"""
        service = InterviewService(self.store, MockQuestionGenerator(should_fail=True), self.feedback_repo)
        with self.assertRaises(GenerationError):
            await service.generate("alice", "Backend", "Junior", None, "technical", 3)
        self.assertEqual(self.store.count("interviews"), 0)

    async def test_03_fenced_output(self):
        service = InterviewService(
            self.store, MockQuestionGenerator(raw_output='```json\n["Q1", "Q2"]\n```'), self.feedback_repo
        )
        interview = await service.generate("alice", "Backend", "Junior", [], "mixed", 2)
        self.assertEqual(interview.questions, ["Q1", "Q2"])

    async def test_04_generate_validation(self):
        with self.assertRaises(ValidationError):
            await self.service.generate("alice", "", "Junior", [], "mixed", 2)
        with self.assertRaises(ValidationError):
            await self.service.generate("alice", "Backend", "Junior", [], "mixed", 0)

    def test_05_latest_excludes_own(self):
        """Scenario: latest lists finalized interviews of other users, newest first"""
        self.store.set("interviews", "a1", {"userId": "alice", "finalized": True, "createdAt": "2026-01-01T00:00:00+00:00"})
        self.store.set("interviews", "b1", {"userId": "bob", "finalized": True, "createdAt": "2026-01-02T00:00:00+00:00"})
        self.store.set("interviews", "b2", {"userId": "bob", "finalized": True, "createdAt": "2026-01-03T00:00:00+00:00"})
        self.store.set("interviews", "b3", {"userId": "bob", "finalized": False, "createdAt": "2026-01-04T00:00:00+00:00"})

        latest = self.service.list_latest("alice")
        self.assertEqual([i.id for i in latest], ["b2", "b1"])

    def test_06_get_unknown(self):
        with self.assertRaises(NotFoundError):
            self.service.get("missing")

    async def test_07_history_pairs_feedback(self):
        interview = self.service.save(self.alice, {"role": "Frontend", "questions": ["Q1"]})
        assessment = validate_assessment(await MockScoringProvider().score("", [
            "Communication Skills", "Technical Knowledge", "Problem-Solving",
            "Cultural & Role Fit", "Confidence & Clarity",
        ]))
        self.feedback_repo.save(interview.id, "alice", assessment)

        history = self.service.history("alice")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].interview.id, interview.id)
        self.assertEqual(history[0].feedback.total_score, 70)


if __name__ == "__main__":
    unittest.main()
