from lib.places.api_client import (
    BusinessRecord,
    MissingApiKeyError,
    PlacesApiError,
    PlacesClient,
    PlacesError,
    clamp_max_results,
)

__all__ = [
    "BusinessRecord",
    "MissingApiKeyError",
    "PlacesApiError",
    "PlacesClient",
    "PlacesError",
    "clamp_max_results",
]
