import os
import uuid
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime, timezone
from werkzeug.utils import secure_filename
from ..errors import GalleryError, ErrorKind
from ..utils.logging import logger

FIELD_NAME = "image"
ALLOWED_EXT = {"jpeg", "jpg", "png", "gif"}
ALLOWED_MIME = {"image/jpeg", "image/png", "image/gif"}
CONTENT_PREFIX = "images"

StoredFile = namedtuple("StoredFile", ["filename", "size", "relative_path"])

_WRITER = ThreadPoolExecutor(max_workers=4, thread_name_prefix="FileWriter")


def generate_filename(original_name):
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    safe_name = secure_filename(original_name) or "upload"
    return f"{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name}"


def discard(path):
    """Remove a stored file, tolerating one that is already gone."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Could not remove {path}: {e}")


def _write(file, path):
    # "xb" refuses to replace an existing file
    out = open(path, "xb")
    try:
        with out:
            file.save(out)
    except Exception:
        discard(path)
        raise
    return os.path.getsize(path)


def _discard_late_write(path):
    def callback(future):
        # a failed _write already cleaned up after itself
        if future.exception() is None:
            logger.warning(f"Discarding {path} written after its upload timed out")
            discard(path)
    return callback


class FileReceiver:
    """Accepts one uploaded image and writes it into the content directory."""

    def __init__(self, content_dir, max_bytes, write_timeout=30.0):
        self.content_dir = content_dir
        self.max_bytes = max_bytes
        self.write_timeout = write_timeout

    def receive(self, files):
        """Validate and persist the `image` field of a request's files.

        Returns a StoredFile; raises GalleryError with a validation kind or
        WRITE_FAILURE.
        """
        file = files.get(FIELD_NAME)
        if file is None or not file.filename:
            raise GalleryError(ErrorKind.NO_FILE_PROVIDED, "Error: No file selected!")
        if not self._allowed(file):
            logger.warning(f"Rejected {file.filename} ({file.mimetype})")
            raise GalleryError(ErrorKind.UNSUPPORTED_TYPE, "Error: Images Only!")

        filename = generate_filename(file.filename)
        stored_path = os.path.join(self.content_dir, filename)
        try:
            os.makedirs(self.content_dir, exist_ok=True)
            future = _WRITER.submit(_write, file, stored_path)
            size = future.result(timeout=self.write_timeout)
        except FutureTimeout:
            future.add_done_callback(_discard_late_write(stored_path))
            raise GalleryError(ErrorKind.WRITE_FAILURE, "Error: Could not save file: write timed out")
        except OSError as e:
            raise GalleryError(ErrorKind.WRITE_FAILURE, f"Error: Could not save file: {e.strerror or e}")

        if size > self.max_bytes:
            discard(stored_path)
            raise self.too_large()

        logger.info(f"Stored {file.filename} as {filename} ({size} bytes)")
        return StoredFile(filename, size, f"{CONTENT_PREFIX}/{filename}")

    def too_large(self):
        return GalleryError(ErrorKind.FILE_TOO_LARGE, f"Error: File too large (max {self.max_bytes} bytes)")

    def _allowed(self, file):
        ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        return ext in ALLOWED_EXT and file.mimetype in ALLOWED_MIME
