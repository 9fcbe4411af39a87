import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, storage

logger = logging.getLogger(__name__)


class MediaLocator:
    """Resolve a video id to a public URL of its clip in the bucket."""

    def __init__(self, bucket, prefix: str = "videos", timeout: float = 10.0):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.timeout = timeout

    def path_for(self, video_id: str) -> str:
        return f"{self.prefix}/{video_id}.mp4"

    def resolve(self, video_id: str) -> str | None:
        """Return the clip's public URL, or None when no clip was uploaded.

        The object's ACL is made public on every call; repeating it is harmless.
        """
        blob = self.bucket.blob(self.path_for(video_id))
        if not blob.exists(timeout=self.timeout):
            logger.info(f"No clip for video {video_id} at {blob.name}")
            return None
        blob.make_public(timeout=self.timeout)
        return blob.public_url


def init_firebase(service_account: dict[str, Any], bucket_name: str):
    """Initialise firebase-admin once and return the storage bucket."""
    if not firebase_admin._apps:
        cred = credentials.Certificate(service_account)
        firebase_admin.initialize_app(cred, {"storageBucket": bucket_name})
        logger.info(f"Firebase initialised for bucket {bucket_name}")
    return storage.bucket()
