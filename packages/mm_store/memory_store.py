import copy
from typing import Any, Dict, List, Optional, Sequence

from .base import DocumentStore, Filter, apply_query


class MemoryDocumentStore(DocumentStore):
    """
    In-memory implementation of DocumentStore.
    Used for local development and tests.
    """
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return None
        return {**copy.deepcopy(doc), "id": doc_id}

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        docs = (
            {**copy.deepcopy(doc), "id": doc_id}
            for doc_id, doc in self._collection(collection).items()
        )
        return apply_query(docs, filters, order_by, descending, limit)

    def set(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        stored = copy.deepcopy(doc)
        stored.pop("id", None)
        self._collection(collection)[doc_id] = stored

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def count(self, collection: str) -> int:
        return len(self._collection(collection))
