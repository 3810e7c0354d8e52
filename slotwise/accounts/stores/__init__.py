"""User store implementations."""

from slotwise.accounts.stores.inmemory import InMemoryUserStore

__all__ = ["InMemoryUserStore"]
