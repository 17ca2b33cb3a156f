"""JSON slot storage (the service's stand-in for browser local storage)."""

from storage.slot_store import PersistentSlot, SlotStore

__all__ = ["PersistentSlot", "SlotStore"]
