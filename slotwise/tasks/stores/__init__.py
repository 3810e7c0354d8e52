"""Task store implementations."""

from slotwise.tasks.stores.inmemory import InMemoryTaskStore

__all__ = ["InMemoryTaskStore"]
