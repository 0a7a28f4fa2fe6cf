import operator
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

# (field, op, value) in the style of a document database "where" clause
Filter = Tuple[str, str, Any]

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


class DocumentStore(ABC):
    """
    Generic document store interface.
    Every call touches a single document; no transactions are offered.
    Returned documents are copies and always carry their `id`.
    """
    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def set(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        """Upsert: create the document or overwrite it in place."""
        pass

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        pass

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex

    def add(self, collection: str, doc: Dict[str, Any]) -> str:
        """Insert under a freshly minted id and return it."""
        doc_id = self.new_id(collection)
        self.set(collection, doc_id, doc)
        return doc_id


def matches(doc: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    for field, op, value in filters:
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        if field not in doc:
            return False
        try:
            if not _OPERATORS[op](doc[field], value):
                return False
        except TypeError:
            return False
    return True


def apply_query(
    docs: Iterable[Dict[str, Any]],
    filters: Sequence[Filter],
    order_by: Optional[str],
    descending: bool,
    limit: Optional[int],
) -> List[Dict[str, Any]]:
    """Filter, order and limit an iterable of documents (shared by the local stores)."""
    results = [doc for doc in docs if matches(doc, filters)]
    if order_by:
        # documents missing the order field are dropped, as an indexed store would
        results = [doc for doc in results if doc.get(order_by) is not None]
        results.sort(key=lambda d: d[order_by], reverse=descending)
    if limit is not None:
        results = results[:limit]
    return results
