from bookit.store.base import BookingStore
from bookit.store.memory import InMemoryStore

__all__ = ["BookingStore", "InMemoryStore"]
