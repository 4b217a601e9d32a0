from collections import namedtuple
from ..errors import GalleryError
from ..utils.logging import logger, log_error

SUCCESS_MSG = "File uploaded successfully"
RECORD_FAILED_MSG = "Error: Could not save image record"

UploadOutcome = namedtuple("UploadOutcome", ["ok", "message", "image", "error"])


class UploadPipeline:
    """Receive one file, record its metadata and report a status message.

    The stored file is not rolled back when the record write fails; the
    file stays on disk without a record and a warning is logged.
    """

    def __init__(self, receiver, store):
        self.receiver = receiver
        self.store = store

    def reject(self, err):
        log_error(err, "Upload")
        return UploadOutcome(False, err.detail, None, err)

    def reject_oversized_request(self):
        """Outcome for a request body too big to be parsed at all."""
        return self.reject(self.receiver.too_large())

    def run(self, files):
        try:
            stored = self.receiver.receive(files)
        except GalleryError as e:
            return self.reject(e)

        try:
            img = self.store.create(name=stored.filename, size=stored.size, path=stored.relative_path)
        except GalleryError as e:
            log_error(e, "Upload")
            logger.warning(f"{stored.relative_path} was written but has no image record")
            return UploadOutcome(False, RECORD_FAILED_MSG, None, e)

        logger.info(f"Image {img.id} recorded for {stored.relative_path}")
        return UploadOutcome(True, SUCCESS_MSG, img, None)
