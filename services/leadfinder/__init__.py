"""Lead finder service.

Finds publicly listed business emails from websites or places searches.

Components:
- Config: Environment-driven settings (config.py)
- Models: Result rows and run modes (models.py)
- CSV: Result rendering (csv_export.py)
- Service: Orchestrates search, scraping and verification (service.py)
"""

from services.leadfinder.config import LeadFinderConfig, get_config, load_config
from services.leadfinder.errors import InvalidRequestError, LeadFinderError
from services.leadfinder.models import PlaceCsvRow, PlacesCsvResult, ResultRow, RunMode
from services.leadfinder.service import IService, Service

__all__ = [
    "LeadFinderConfig",
    "get_config",
    "load_config",
    "InvalidRequestError",
    "LeadFinderError",
    "PlaceCsvRow",
    "PlacesCsvResult",
    "ResultRow",
    "RunMode",
    "IService",
    "Service",
]
