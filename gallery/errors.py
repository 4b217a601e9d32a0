from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    NO_FILE_PROVIDED = "no_file_provided"
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_TYPE = "unsupported_type"
    WRITE_FAILURE = "write_failure"
    STORE_FAILURE = "store_failure"
    CONFIG_FAILURE = "config_failure"


VALIDATION_KINDS = {ErrorKind.NO_FILE_PROVIDED, ErrorKind.FILE_TOO_LARGE, ErrorKind.UNSUPPORTED_TYPE}

HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NO_FILE_PROVIDED: 400,
    ErrorKind.FILE_TOO_LARGE: 413,
    ErrorKind.UNSUPPORTED_TYPE: 415,
    ErrorKind.WRITE_FAILURE: 500,
    ErrorKind.STORE_FAILURE: 500,
    ErrorKind.CONFIG_FAILURE: 500,
}


class GalleryError(Exception):
    """Failure with a machine-readable kind and a message fit for the client."""

    def __init__(self, kind, detail):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    @property
    def is_validation(self):
        return self.kind in VALIDATION_KINDS

    @property
    def status_code(self):
        return HTTP_STATUS[self.kind]

    def __str__(self):
        return self.detail

    def __repr__(self):
        return f"GalleryError({self.kind.value}, {self.detail!r})"
