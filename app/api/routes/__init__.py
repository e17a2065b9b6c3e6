"""Route modules exposed by the API package."""

from . import actions, auth, ping, records, tickets

__all__ = ["actions", "auth", "ping", "records", "tickets"]
