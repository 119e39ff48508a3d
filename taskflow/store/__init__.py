"""taskflow.store -- The memory bank document store."""

from taskflow.store.documents import DEFAULT_DOCUMENTS, DocumentStore

__all__ = ["DocumentStore", "DEFAULT_DOCUMENTS"]
