"""Reference store implementations."""

from .catalog import load_catalog
from .memory import InMemoryImageStore, InMemoryVectorStore

__all__ = ["InMemoryImageStore", "InMemoryVectorStore", "load_catalog"]
