"""Upload admission: validation of incoming files and persistence to disk."""

from __future__ import annotations

from .streamers import save_upload, stream_file
from .validators import UploadedFile, admit_upload, validate_upload

__all__: list[str] = [
    "UploadedFile",
    "admit_upload",
    "save_upload",
    "stream_file",
    "validate_upload",
]
