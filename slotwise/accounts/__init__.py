"""User accounts, calendar connection state and working hours."""

from slotwise.accounts.store import UserStore
from slotwise.accounts.stores.inmemory import InMemoryUserStore

__all__ = ["UserStore", "InMemoryUserStore"]
