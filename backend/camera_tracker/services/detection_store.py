import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..models.detection import Detection, utcnow
from ..schemas.detection import DetectionCreate, DetectionOut, VideoGroup

logger = logging.getLogger(__name__)


class DetectionStore:
    """Access to detection records over one database session.

    Records are never updated. Reads are full scans ordered in SQL; there is
    no pagination.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, payload: DetectionCreate) -> int:
        det = Detection(
            camera_id=payload.camera_id,
            video_id=payload.video_id,
            item=payload.item,
            confidence=payload.confidence,
            timestamp=payload.timestamp,
            timestamp_sec=payload.timestamp_sec,
            created_at=utcnow(),
        )
        self.db.add(det)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(det)
        logger.info(f"Detection {det.id} logged: {det.item} on {det.camera_id}/{det.video_id}")
        return det.id

    def list_all(self) -> list[Detection]:
        stmt = select(Detection).order_by(Detection.timestamp.desc(), Detection.id.desc())
        return list(self.db.scalars(stmt))

    def list_by_video(self, video_id: str) -> list[Detection]:
        stmt = (
            select(Detection)
            .where(Detection.video_id == video_id)
            .order_by(Detection.timestamp_sec.asc(), Detection.id.asc())
        )
        return list(self.db.scalars(stmt))

    def _search_stmt(self, term: str):
        # Literal match: % and _ in the term are escaped, never a pattern
        return (
            select(Detection)
            .where(Detection.item.icontains(term, autoescape=True))
            .order_by(Detection.timestamp.desc(), Detection.id.desc())
        )

    def search(self, term: str) -> list[Detection]:
        return list(self.db.scalars(self._search_stmt(term)))

    def latest_by_item(self, term: str) -> Detection | None:
        return self.db.scalars(self._search_stmt(term).limit(1)).first()

    def distinct_items(self) -> list[str]:
        return sorted(self.db.scalars(select(Detection.item).distinct()))

    def delete_by_id(self, detection_id: int) -> bool:
        """Delete one record. Returns False when no record had that id."""
        try:
            result = self.db.execute(delete(Detection).where(Detection.id == detection_id))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result.rowcount > 0


def group_by_video(detections: Iterable[Detection]) -> list[VideoGroup]:
    """Group detections by video, keeping the order of first appearance.

    The camera of a video is the camera of its first detection in the input.
    """
    videos: dict[str, VideoGroup] = {}
    for det in detections:
        group = videos.get(det.video_id)
        if group is None:
            group = VideoGroup(video_id=det.video_id, camera_id=det.camera_id)
            videos[det.video_id] = group
        group.detections.append(DetectionOut.model_validate(det))
    return list(videos.values())
