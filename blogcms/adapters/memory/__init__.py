from blogcms.adapters.memory.store import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore"]
