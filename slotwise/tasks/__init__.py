"""Task persistence."""

from slotwise.tasks.store import TaskStore
from slotwise.tasks.stores.inmemory import InMemoryTaskStore

__all__ = ["TaskStore", "InMemoryTaskStore"]
