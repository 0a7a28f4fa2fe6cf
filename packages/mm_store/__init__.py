from .base import DocumentStore, Filter
from .file_store import JsonFileDocumentStore
from .memory_store import MemoryDocumentStore

__all__ = ["DocumentStore", "Filter", "JsonFileDocumentStore", "MemoryDocumentStore"]
