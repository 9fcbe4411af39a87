import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from ..dependencies import get_media_locator, get_store
from ..models.detection import INTEGER_MAX, INTEGER_MIN
from ..schemas.detection import DetectionOut
from ..services.detection_store import DetectionStore, group_by_video
from ..services.media_locator import MediaLocator
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def _home(**params) -> RedirectResponse:
    url = "/"
    if params:
        url += "?" + urlencode(params)
    return RedirectResponse(url, status_code=302)


def _tz(request: Request) -> str:
    return request.app.state.settings.timezone


@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    message: str | None = Query(None),
    error: str | None = Query(None),
    store: DetectionStore = Depends(get_store),
):
    try:
        videos = group_by_video(store.list_all())
    except SQLAlchemyError:
        logger.exception("Error loading dashboard")
        videos, message, error = [], None, "Failed to load data"
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"videos": videos, "message": message, "error": error, "tz": _tz(request)},
    )


@router.get("/search", response_class=HTMLResponse)
def search(
    request: Request,
    item: str | None = Query(None),
    store: DetectionStore = Depends(get_store),
):
    if not item:
        return _home()

    error = None
    try:
        detections = [DetectionOut.model_validate(d) for d in store.search(item)]
    except SQLAlchemyError:
        logger.exception(f"Error searching for {item!r}")
        detections, error = [], "Search failed"
    return templates.TemplateResponse(
        request,
        "search.html",
        {"detections": detections, "search_term": item, "error": error, "tz": _tz(request)},
    )


@router.get("/video/{video_id}", response_class=HTMLResponse)
def video(
    request: Request,
    video_id: str,
    store: DetectionStore = Depends(get_store),
    locator: MediaLocator | None = Depends(get_media_locator),
):
    try:
        detections = [DetectionOut.model_validate(d) for d in store.list_by_video(video_id)]
    except SQLAlchemyError:
        logger.exception(f"Error loading video {video_id}")
        return _home(error="Failed to load video")

    if not detections:
        return _home(error="Video not found")

    video_url = None
    if locator is not None:
        try:
            video_url = locator.resolve(video_id)
        except Exception as e:
            # Playback is best-effort; the detection list still renders
            logger.warning(f"Could not resolve clip for video {video_id}: {e}")

    return templates.TemplateResponse(
        request,
        "video.html",
        {
            "video_id": video_id,
            "video_url": video_url,
            "detections": detections,
            "camera_id": detections[0].camera_id,
            "tz": _tz(request),
        },
    )


@router.post("/delete/{detection_id}")
def delete_detection(detection_id: str, store: DetectionStore = Depends(get_store)):
    try:
        pk = int(detection_id)
        if not INTEGER_MIN <= pk <= INTEGER_MAX:
            raise ValueError("id out of range")
    except ValueError:
        logger.warning(f"Refusing to delete malformed id {detection_id!r}")
        return {"success": False, "error": "Failed to delete"}

    try:
        deleted = store.delete_by_id(pk)
    except SQLAlchemyError:
        logger.exception(f"Error deleting detection {pk}")
        return {"success": False, "error": "Failed to delete"}
    return {"success": True, "deleted": deleted}
