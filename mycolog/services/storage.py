"""Photo storage on the local filesystem under UPLOAD_FOLDER."""

import logging
import os
import time
from datetime import date, datetime
from pathlib import Path

from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "/media/"


class StorageError(ValueError):
    """Raised when a photo cannot be stored or removed."""


class ImageStore:
    """Stores batch photos as ``{user_id}/{batch_id}_{epoch_ms}_{name}``."""

    def __init__(self, root: str, allowed_extensions=None):
        self.root = Path(root)
        self.allowed_extensions = {e.lower() for e in (allowed_extensions or [])}

    def _resolve(self, relative: str) -> Path | None:
        joined = safe_join(str(self.root), relative)
        return Path(joined) if joined else None

    def is_allowed(self, filename: str) -> bool:
        if not self.allowed_extensions:
            return True
        return "." in filename and filename.rsplit(".", 1)[1].lower() in self.allowed_extensions

    def upload(self, user_id: int, batch_id: str, file) -> str:
        """Save an uploaded file and return its public URL."""
        filename = secure_filename(file.filename or "")
        if not filename:
            raise StorageError("No file selected")
        if not self.is_allowed(filename):
            raise StorageError(f"Invalid file type: {file.filename}")

        relative = f"{user_id}/{batch_id}_{int(time.time() * 1000)}_{filename}"
        target = self._resolve(relative)
        if target is None:
            raise StorageError("Invalid file name")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            file.save(str(target))
        except OSError as exc:
            logger.exception("Failed to store photo %s", relative)
            raise StorageError(f"Upload failed: {exc}") from exc

        logger.info("Stored photo %s", relative)
        return MEDIA_PREFIX + relative

    def path_for_url(self, url: str) -> Path | None:
        """Filesystem path for a URL produced by upload(), None if foreign."""
        if not url or MEDIA_PREFIX not in url:
            return None
        return self._resolve(url.split(MEDIA_PREFIX, 1)[1])

    def delete(self, url: str) -> bool:
        """Remove the file behind *url*; returns False when nothing was removed."""
        path = self.path_for_url(url)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.exception("Failed to delete photo %s", path)
            raise StorageError(f"Delete failed: {exc}") from exc
        logger.info("Deleted photo %s", path)
        return True

    def delete_before(self, user_id: int, cutoff: date) -> int:
        """Delete the user's photos stored before *cutoff*; returns the count."""
        user_dir = self._resolve(str(user_id))
        if user_dir is None or not user_dir.is_dir():
            return 0

        limit = datetime.combine(cutoff, datetime.min.time()).timestamp()
        removed = 0
        for entry in user_dir.iterdir():
            if entry.is_file() and entry.stat().st_mtime < limit:
                entry.unlink()
                removed += 1
        logger.info("Removed %d photos older than %s for user %s", removed, cutoff, user_id)
        return removed

    def health(self) -> tuple[bool, str]:
        """Return (ok, message) describing whether photos can be written."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return False, f"Cannot create {self.root}: {exc}"
        if not os.access(self.root, os.W_OK):
            return False, f"{self.root} is not writable"
        return True, f"Photo storage at {self.root} is active."
