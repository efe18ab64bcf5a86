"""Storage adapters implementing the SymptomStore protocol."""

from .memory_store import InMemorySymptomStore

__all__ = ["InMemorySymptomStore"]
