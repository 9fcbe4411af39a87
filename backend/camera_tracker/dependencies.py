from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .database import get_db
from .services.detection_store import DetectionStore
from .services.media_locator import MediaLocator


def get_store(db: Session = Depends(get_db)) -> DetectionStore:
    return DetectionStore(db)


def get_media_locator(request: Request) -> MediaLocator | None:
    return request.app.state.media_locator
