from .presence import PresenceStore, ValidationError, UNAVAILABLE, SIDES

__all__ = ["PresenceStore", "ValidationError", "UNAVAILABLE", "SIDES"]
