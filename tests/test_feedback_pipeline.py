import unittest

from packages.mm_core.errors import PermissionDeniedError, ScoringError
from packages.mm_feedback.pipeline import FeedbackPipeline
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_feedback.rubric import RUBRIC
from packages.mm_feedback.schema import validate_assessment
from packages.mm_providers.llm.mock import MockScoringProvider
from packages.mm_store.memory_store import MemoryDocumentStore
from packages.mm_transcript.dto import Speaker, Turn


def valid_response(total=82, names=RUBRIC):
    return {
        "totalScore": total,
        "categoryScores": [{"name": n, "score": 80, "comment": "ok"} for n in names],
        "strengths": ["Structured answers"],
        "areasForImprovement": ["Depth on system design"],
        "finalAssessment": "Solid candidate.",
    }


class FailingStore(MemoryDocumentStore):
    """Store whose writes always fail."""
    def set(self, collection, doc_id, doc):
        raise OSError("disk full")


class RaisingScorer(MockScoringProvider):
    async def score(self, rendered_transcript, rubric):
        raise RuntimeError("connection reset")


class TestFeedbackPipeline(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryDocumentStore()
        self.repo = FeedbackRepository(self.store)
        self.turns = [
            Turn(speaker=Speaker.CANDIDATE, text="Hi"),
            Turn(speaker=Speaker.ASSISTANT, text="Hello, tell me about yourself"),
        ]

    async def test_01_success_persists_record(self):
        """Scenario: valid scoring output -> one feedback document with all fields"""
        scorer = MockScoringProvider(response=valid_response())
        pipeline = FeedbackPipeline(scorer, self.repo)

        result = await pipeline.synthesize_feedback("int_1", "user_1", self.turns)

        self.assertTrue(result.success)
        self.assertEqual(
            scorer.calls[0]["transcript"],
            "candidate: Hi\nassistant: Hello, tell me about yourself\n",
        )
        self.assertEqual(scorer.calls[0]["rubric"], list(RUBRIC))

        doc = self.store.get("feedback", result.feedback_id)
        self.assertEqual(doc["interviewId"], "int_1")
        self.assertEqual(doc["userId"], "user_1")
        self.assertEqual(doc["totalScore"], 82)
        self.assertEqual([c["name"] for c in doc["categoryScores"]], list(RUBRIC))
        self.assertIn("createdAt", doc)

        self.assertEqual(self.repo.get(result.feedback_id).interview_id, "int_1")
        self.assertEqual([f.id for f in self.repo.list_by_user("user_1")], [result.feedback_id])

    async def test_02_malformed_output_writes_nothing(self):
        """Scenario: score given as a string -> failure, store untouched"""
        response = valid_response()
        response["categoryScores"][0]["score"] = "80"
        pipeline = FeedbackPipeline(MockScoringProvider(response=response), self.repo)

        result = await pipeline.synthesize_feedback("int_1", "user_1", self.turns)

        self.assertFalse(result.success)
        self.assertIsNone(result.feedback_id)
        self.assertEqual(self.store.count("feedback"), 0)

    async def test_03_retake_overwrites_in_place(self):
        """Scenario: same feedback id twice -> one document, latest content"""
        first = FeedbackPipeline(MockScoringProvider(response=valid_response(total=40)), self.repo)
        second = FeedbackPipeline(MockScoringProvider(response=valid_response(total=90)), self.repo)

        r1 = await first.synthesize_feedback("int_1", "user_1", self.turns, feedback_id="fb_1")
        r2 = await second.synthesize_feedback("int_1", "user_1", self.turns, feedback_id="fb_1")

        self.assertEqual(r1.feedback_id, "fb_1")
        self.assertEqual(r2.feedback_id, "fb_1")
        self.assertEqual(self.store.count("feedback"), 1)
        self.assertEqual(self.store.get("feedback", "fb_1")["totalScore"], 90)

    async def test_04_persistence_failure(self):
        """Scenario: store write fails -> success=false, no exception"""
        repo = FeedbackRepository(FailingStore())
        pipeline = FeedbackPipeline(MockScoringProvider(response=valid_response()), repo)

        result = await pipeline.synthesize_feedback("int_1", "user_1", self.turns)
        self.assertFalse(result.success)

    async def test_05_scorer_exception(self):
        """Scenario: scorer raises an arbitrary error -> success=false"""
        pipeline = FeedbackPipeline(RaisingScorer(), self.repo)

        result = await pipeline.synthesize_feedback("int_1", "user_1", self.turns)
        self.assertFalse(result.success)
        self.assertEqual(self.store.count("feedback"), 0)

    async def test_06_empty_transcript_still_scored(self):
        scorer = MockScoringProvider()
        pipeline = FeedbackPipeline(scorer, self.repo)

        result = await pipeline.synthesize_feedback("int_1", "user_1", [])
        self.assertTrue(result.success)
        self.assertEqual(scorer.calls[0]["transcript"], "")

    async def test_07_retake_id_of_another_user_refused(self):
        """Scenario: retake id owned by another user or interview -> failure, scorer not called, record intact"""
        owner = FeedbackPipeline(MockScoringProvider(response=valid_response(total=40)), self.repo)
        await owner.synthesize_feedback("int_1", "user_1", self.turns, feedback_id="fb_1")

        scorer = MockScoringProvider(response=valid_response(total=99))
        pipeline = FeedbackPipeline(scorer, self.repo)

        other_user = await pipeline.synthesize_feedback("int_1", "user_2", self.turns, feedback_id="fb_1")
        other_interview = await pipeline.synthesize_feedback("int_2", "user_1", self.turns, feedback_id="fb_1")

        self.assertFalse(other_user.success)
        self.assertFalse(other_interview.success)
        self.assertEqual(scorer.calls, [])
        doc = self.store.get("feedback", "fb_1")
        self.assertEqual(doc["userId"], "user_1")
        self.assertEqual(doc["interviewId"], "int_1")
        self.assertEqual(doc["totalScore"], 40)

    def test_08_repository_refuses_foreign_overwrite(self):
        assessment = validate_assessment(valid_response())
        self.repo.save("int_1", "user_1", assessment, feedback_id="fb_1")

        with self.assertRaises(PermissionDeniedError):
            self.repo.save("int_1", "user_2", assessment, feedback_id="fb_1")
        self.assertEqual(self.repo.save("int_1", "user_1", assessment, feedback_id="fb_1"), "fb_1")


class TestValidateAssessment(unittest.TestCase):
    def test_categories_reordered_and_canonical(self):
        names = ["confidence & clarity", "problem solving", "Technical Knowledge",
                 "COMMUNICATION SKILLS", "Cultural & Role Fit"]
        assessment = validate_assessment(valid_response(names=names))
        self.assertEqual([c.name for c in assessment.category_scores], list(RUBRIC))

    def test_missing_category(self):
        with self.assertRaises(ScoringError):
            validate_assessment(valid_response(names=RUBRIC[:4]))

    def test_unknown_category(self):
        with self.assertRaises(ScoringError):
            validate_assessment(valid_response(names=RUBRIC[:4] + ("Charisma",)))

    def test_duplicate_category(self):
        with self.assertRaises(ScoringError):
            validate_assessment(valid_response(names=RUBRIC + ("Technical Knowledge",)))

    def test_score_out_of_range(self):
        response = valid_response()
        response["categoryScores"][1]["score"] = 101
        with self.assertRaises(ScoringError):
            validate_assessment(response)

    def test_missing_field(self):
        response = valid_response()
        del response["finalAssessment"]
        with self.assertRaises(ScoringError):
            validate_assessment(response)

    def test_not_an_object(self):
        with self.assertRaises(ScoringError):
            validate_assessment(["not", "a", "dict"])

    def test_total_not_derived_from_categories(self):
        """totalScore is kept as given even when far from the category mean"""
        assessment = validate_assessment(valid_response(total=10))
        self.assertEqual(assessment.total_score, 10)


if __name__ == "__main__":
    unittest.main()
