# priceboard/models/errors.py

"""Error taxonomy shared by the store, the HTTP API and the clients.

No stale-read error exists: viewers observe eventual consistency through
their next poll.
"""


class PriceBoardError(Exception):
    """Base class for every priceboard failure."""


class ValidationError(PriceBoardError):
    """A write payload is malformed or empty (HTTP 400)."""


class TransportError(PriceBoardError):
    """The store or the API could not be reached or failed (HTTP 500)."""
