import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..dependencies import get_store
from ..schemas.detection import (
    DetectionCreate,
    DetectionOut,
    ItemsOut,
    LastSeenOut,
    missing_fields,
)
from ..services.detection_store import DetectionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_payload(request: Request) -> dict[str, Any]:
    """Body as a dict; JSON and form posts are both accepted."""
    if request.headers.get("content-type", "").startswith(FORM_TYPES):
        form = await request.form()
        return dict(form)
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.get("/last-seen/{item}", response_model=LastSeenOut, response_model_exclude_none=True)
def last_seen(item: str, store: DetectionStore = Depends(get_store)):
    try:
        det = store.latest_by_item(item)
    except SQLAlchemyError:
        logger.exception(f"Error looking up last sighting of {item!r}")
        return JSONResponse(status_code=500, content={"error": "Failed to search"})

    if det is None:
        return LastSeenOut(found=False, message="Item never detected")
    return LastSeenOut(found=True, detection=DetectionOut.model_validate(det))


@router.post("/detection")
async def log_detection(request: Request, store: DetectionStore = Depends(get_store)):
    payload = await _read_payload(request)

    missing = missing_fields(payload)
    if missing:
        logger.warning(f"Rejected detection, missing {missing}")
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    try:
        detection = DetectionCreate.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected detection, invalid values: {e.errors(include_url=False)}")
        return JSONResponse(status_code=400, content={"error": "Invalid field values"})

    try:
        detection_id = await run_in_threadpool(store.insert, detection)
    except SQLAlchemyError:
        logger.exception("Error logging detection")
        return JSONResponse(status_code=500, content={"error": "Failed to log detection"})

    return {"success": True, "message": "Detection logged", "id": detection_id}


@router.get("/items", response_model=ItemsOut)
def list_items(store: DetectionStore = Depends(get_store)):
    try:
        items = store.distinct_items()
    except SQLAlchemyError:
        logger.exception("Error listing items")
        return JSONResponse(status_code=500, content={"error": "Failed to get items"})
    return ItemsOut(items=items)
