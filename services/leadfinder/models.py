"""Data models for lead finder runs."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from lib.places.api_client import BusinessRecord


class RunMode(str, Enum):
    WEBSITES = "websites"
    PLACES = "places"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ResultRow(_CamelModel):
    """One output row per website (websites mode) or business (places mode)."""
    name: str = ""
    phone: str = ""
    website: str = ""
    address: str = ""
    rating: Optional[float] = None
    emails: list[str] = []
    verified_emails: list[str] = []

    @classmethod
    def for_business(
        cls,
        business: BusinessRecord,
        emails: list[str],
        verified_emails: list[str],
    ) -> "ResultRow":
        return cls(
            name=business.name,
            phone=business.phone,
            website=business.website,
            address=business.address,
            rating=business.rating,
            emails=emails,
            verified_emails=verified_emails,
        )


class PlaceCsvRow(_CamelModel):
    """Row shape returned by the places-to-csv endpoint."""
    business_name: str = ""
    phone: str = ""
    website: str = ""
    address: str = ""
    rating: Optional[float] = None
    found_emails: list[str] = []
    verified_emails: list[str] = []

    @classmethod
    def from_row(cls, row: ResultRow) -> "PlaceCsvRow":
        return cls(
            business_name=row.name,
            phone=row.phone,
            website=row.website,
            address=row.address,
            rating=row.rating,
            found_emails=row.emails,
            verified_emails=row.verified_emails,
        )


class PlacesCsvResult(_CamelModel):
    count: int
    rows: list[PlaceCsvRow]
    csv: str
