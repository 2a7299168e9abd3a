"""
Local File Helpers.

Working-copy and temp-upload file handling shared by the feed store, the
codec and the intake pipeline.

Exports:
    atomic_write_bytes: Replace a file's content in one rename
    temp_upload_path: Unique "UploadedFile-<uuid>.bin" path in a work dir
    try_hard_delete: Delete a file, logging instead of raising
"""

import os
import tempfile
import uuid

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "LocalFiles")

TEMP_UPLOAD_PREFIX = "UploadedFile-"
TEMP_UPLOAD_SUFFIX = ".bin"


def atomic_write_bytes(path: str, data: bytes) -> None:
    """
    Write data to a temp file beside `path`, then os.replace() it into place.

    Readers see either the old content or the new content, never a partial
    write.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try_hard_delete(tmp_path)
        raise


def temp_upload_path(work_dir: str) -> str:
    os.makedirs(work_dir, exist_ok=True)
    return os.path.join(work_dir, f"{TEMP_UPLOAD_PREFIX}{uuid.uuid4()}{TEMP_UPLOAD_SUFFIX}")


def try_hard_delete(path: str) -> bool:
    """
    Delete `path` if it exists.

    Returns:
        True if the file is gone afterwards
    """
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Could not delete {path}: {e}")
        return False
