"""Lead finder errors.

Client-side problems raise InvalidRequestError. Upstream and config errors
from the places client (lib.places) propagate as-is.
"""


class LeadFinderError(Exception):
    """Base error for the lead finder service."""


class InvalidRequestError(LeadFinderError, ValueError):
    """Request is missing required input or names an unknown mode."""
