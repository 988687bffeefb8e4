"""API routes for lead finding."""

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from lib.places.api_client import MissingApiKeyError
from services.leadfinder import IService, Service
from services.leadfinder.csv_export import render_csv
from services.leadfinder.errors import InvalidRequestError
from services.leadfinder.models import PlacesCsvResult

router = APIRouter()

_service: Optional[IService] = None


def get_service() -> IService:
    global _service
    if _service is None:
        _service = Service()
    return _service


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RunBody(BaseModel):
    """Find emails for websites or places queries.

    Example (websites):
        {"mode": "websites", "items": ["example.com"], "verify": true}

    Example (places, with CSV alongside the rows):
        {"mode": "places", "items": ["coffee shops in Seattle"], "maxResults": 10, "format": "csv"}
    """

    model_config = ConfigDict(populate_by_name=True)

    mode: Optional[str] = None  # "websites" | "places" (default)
    items: Optional[Any] = None  # validated by the service so bad input is a 400
    max_results: Optional[Any] = Field(default=None, alias="maxResults")
    verify: bool = False
    format: Literal["json", "csv"] = "json"


class PlacesToCsvBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text_query: Optional[str] = Field(default=None, alias="textQuery")
    max_results: Optional[Any] = Field(default=20, alias="maxResults")
    verify_emails: bool = Field(default=False, alias="verifyEmails")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/", response_class=PlainTextResponse)
async def health():
    return "Lead Finder API running"


@router.post("/api/run")
async def run(body: RunBody, service: IService = Depends(get_service)):
    try:
        rows = await service.run(
            mode=body.mode,
            items=body.items,
            max_results=body.max_results,
            verify=body.verify,
        )
    except (InvalidRequestError, MissingApiKeyError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    payload = {"rows": [r.model_dump(by_alias=True) for r in rows]}
    if body.format == "csv":
        payload["csv"] = render_csv(rows)
    return payload


@router.post("/api/places-to-csv", response_model=PlacesCsvResult)
async def places_to_csv(body: PlacesToCsvBody, service: IService = Depends(get_service)):
    try:
        return await service.places_to_csv(
            text_query=body.text_query,
            max_results=body.max_results,
            verify=body.verify_emails,
        )
    except (InvalidRequestError, MissingApiKeyError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Places to CSV failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
