from enum import Enum


class FirestoreOperators(str, Enum):
    LT = "<"
    LTE = "<="
    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    IN = "in"
    NOT_IN = "not-in"


class OrderByDirection(str, Enum):
    DESCENDING = "DESCENDING"
    ASCENDING = "ASCENDING"

    def __str__(self):
        return self.value


class ProfileState(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    EDIT_DIALOG = "edit-dialog-open"
    LOGOUT_DIALOG = "logout-dialog-open"


class UploadState(str, Enum):
    IDLE = "idle"
    PERMISSION_REQUESTED = "permission-requested"
    PICKING = "picking"
    PICKED = "picked"
    BLOB_CONVERTING = "blob-converting"
    UPLOADING = "uploading"
    URL_RESOLVED = "url-resolved"
    ERROR = "error"


class ToastKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
