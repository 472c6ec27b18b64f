import logging
import os
import shutil
import time
import uuid
from dataclasses import dataclass

from fastapi import UploadFile

from driveshare.core.config import settings
from driveshare.core.errors import StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class StoredBlob:
    filename: str
    path: str
    size: int


def get_best_storage_path() -> str:
    """
    Selects the storage path with the most available space.
    """
    best_path = None
    max_free_space = -1

    for path in settings.STORAGE_PATHS:
        try:
            os.makedirs(path, exist_ok=True)
            usage = shutil.disk_usage(path)
            if usage.free > max_free_space:
                max_free_space = usage.free
                best_path = path
        except OSError as e:
            logger.warning("Could not check disk usage for path %s: %s", path, e)
            continue

    if best_path is None:
        raise StoreUnavailable("No usable storage paths found.")

    return best_path


def make_stored_filename(original_name: str) -> str:
    _, ext = os.path.splitext(original_name)
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{ext.lower()}"


def save_upload(upload: UploadFile) -> StoredBlob:
    """
    Stream an upload to disk in 1 MiB chunks. The partial file is removed
    if the size limit is hit or the write fails.
    """
    filename = make_stored_filename(upload.filename or "")
    path = os.path.join(get_best_storage_path(), filename)
    size = 0
    try:
        with open(path, "wb") as out:
            while chunk := upload.file.read(CHUNK_SIZE):
                size += len(chunk)
                if size > settings.MAX_UPLOAD_SIZE:
                    raise ValidationError(
                        f"File exceeds the {settings.MAX_UPLOAD_SIZE} byte upload limit", field="file"
                    )
                out.write(chunk)
    except ValidationError:
        remove_file(path)
        raise
    except OSError as exc:
        remove_file(path)
        logger.exception("Failed to write upload to %s", path)
        raise StoreUnavailable("Could not store the uploaded file") from exc
    return StoredBlob(filename=filename, path=path, size=size)


def file_exists(path: str) -> bool:
    return os.path.isfile(path)


def remove_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove %s", path, exc_info=True)
