import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence

from packages.mm_core.errors import PersistenceError

from .base import DocumentStore, Filter, apply_query

logger = logging.getLogger("mockmate.store")

_SAFE_NAME = re.compile(r"^[A-Za-z0-9_\-]+$")


class JsonFileDocumentStore(DocumentStore):
    """
    File-based implementation of DocumentStore.
    Layout: {base_dir}/{collection}/{doc_id}.json, one document per file.
    Writes go through a temp file and os.replace so a document is never half written.
    """
    def __init__(self, base_dir: str = "data/store"):
        self.base_dir = base_dir
        self._ensure_dir(self.base_dir)

    def _ensure_dir(self, path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create directory {path}: {e}") from e

    def _path(self, collection: str, doc_id: str) -> str:
        if not _SAFE_NAME.match(collection) or not _SAFE_NAME.match(doc_id):
            raise PersistenceError(
                "Invalid collection or document id",
                details={"collection": collection, "id": doc_id},
            )
        return os.path.join(self.base_dir, collection, f"{doc_id}.json")

    def _read(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read document {path}: {e}")
            return None

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._read(self._path(collection, doc_id))
        if doc is None:
            return None
        doc["id"] = doc_id
        return doc

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        coll_dir = os.path.join(self.base_dir, collection)
        if not os.path.isdir(coll_dir):
            return []

        docs = []
        for filename in sorted(os.listdir(coll_dir)):
            doc_id, ext = os.path.splitext(filename)
            if ext != ".json":
                continue
            doc = self._read(os.path.join(coll_dir, filename))
            if doc is None:
                continue
            doc["id"] = doc_id
            docs.append(doc)
        return apply_query(docs, filters, order_by, descending, limit)

    def set(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        path = self._path(collection, doc_id)
        self._ensure_dir(os.path.dirname(path))

        payload = {k: v for k, v in doc.items() if k != "id"}
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.exception(f"Failed to write document {path}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        path = self._path(collection, doc_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise PersistenceError(f"Failed to delete {collection}/{doc_id}: {e}") from e
