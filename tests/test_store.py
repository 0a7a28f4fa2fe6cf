import os
import shutil
import tempfile
import unittest

from packages.mm_core.errors import PersistenceError
from packages.mm_store.file_store import JsonFileDocumentStore
from packages.mm_store.memory_store import MemoryDocumentStore


class StoreContract:
    """Behaviour shared by every DocumentStore implementation."""
    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_01_set_get_carries_id(self):
        self.store.set("feedback", "fb1", {"totalScore": 80, "id": "ignored"})
        doc = self.store.get("feedback", "fb1")
        self.assertEqual(doc, {"totalScore": 80, "id": "fb1"})

    def test_02_missing_returns_none(self):
        self.assertIsNone(self.store.get("feedback", "nope"))
        self.assertEqual(self.store.query("nothing_here"), [])

    def test_03_upsert_overwrites(self):
        self.store.set("feedback", "fb1", {"totalScore": 10})
        self.store.set("feedback", "fb1", {"totalScore": 90})
        self.assertEqual(self.store.get("feedback", "fb1")["totalScore"], 90)
        self.assertEqual(len(self.store.query("feedback")), 1)

    def test_04_query_filter_order_limit(self):
        self.store.set("interviews", "a", {"userId": "u1", "createdAt": "2026-01-01"})
        self.store.set("interviews", "b", {"userId": "u2", "createdAt": "2026-01-03"})
        self.store.set("interviews", "c", {"userId": "u1", "createdAt": "2026-01-02"})
        self.store.set("interviews", "d", {"userId": "u1"})

        docs = self.store.query(
            "interviews", filters=[("userId", "==", "u1")], order_by="createdAt", descending=True
        )
        self.assertEqual([d["id"] for d in docs], ["c", "a"])

        docs = self.store.query("interviews", filters=[("userId", "!=", "u2")], limit=1)
        self.assertEqual(len(docs), 1)

    def test_05_add_and_delete(self):
        doc_id = self.store.add("scheduled_interviews", {"title": "x"})
        self.assertEqual(self.store.get("scheduled_interviews", doc_id)["title"], "x")
        self.store.delete("scheduled_interviews", doc_id)
        self.store.delete("scheduled_interviews", doc_id)
        self.assertIsNone(self.store.get("scheduled_interviews", doc_id))

    def test_06_returned_docs_are_copies(self):
        self.store.set("feedback", "fb1", {"strengths": ["a"]})
        doc = self.store.get("feedback", "fb1")
        doc["strengths"].append("b")
        self.assertEqual(self.store.get("feedback", "fb1")["strengths"], ["a"])

    def test_07_unknown_operator(self):
        self.store.set("feedback", "fb1", {"totalScore": 1})
        with self.assertRaises(ValueError):
            self.store.query("feedback", filters=[("totalScore", "~", 1)])


class TestMemoryDocumentStore(StoreContract, unittest.TestCase):
    def make_store(self):
        return MemoryDocumentStore()


class TestJsonFileDocumentStore(StoreContract, unittest.TestCase):
    def make_store(self):
        self.tmp_dir = tempfile.mkdtemp()
        return JsonFileDocumentStore(base_dir=os.path.join(self.tmp_dir, "store"))

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_08_persists_across_instances(self):
        self.store.set("feedback", "fb1", {"totalScore": 55})
        reopened = JsonFileDocumentStore(base_dir=self.store.base_dir)
        self.assertEqual(reopened.get("feedback", "fb1")["totalScore"], 55)

    def test_09_rejects_path_traversal(self):
        with self.assertRaises(PersistenceError):
            self.store.set("feedback", "../escape", {"x": 1})


if __name__ == "__main__":
    unittest.main()
