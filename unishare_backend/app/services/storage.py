import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from fastapi import HTTPException, UploadFile

from app.core.config import settings

logger = logging.getLogger(__name__)

_CHUNK_BYTES = 1024 * 1024
_PUBLIC_PREFIX = "uploads"


@dataclass
class StoredFile:
    path: Path
    url: str
    size: int


def _public_url(name: str) -> str:
    # A locator only: files are served through the download and preview routes.
    return f"{settings.api_url.rstrip('/')}/{_PUBLIC_PREFIX}/{name}"


def _generated_name(original: str | None) -> str:
    suffix = Path(original or "").suffix.lower()
    if not suffix[1:].isalnum() or len(suffix) > 10:
        suffix = ""
    return f"{uuid4().hex}{suffix}"


def save_upload(upload: UploadFile) -> StoredFile:
    """Stream ``upload`` to the upload directory under an unguessable name.

    Raises 413 and removes the partial file once the configured size cap is
    exceeded.
    """
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = _generated_name(upload.filename)
    dest = upload_dir / name

    size = 0
    with dest.open("wb") as out:
        while chunk := upload.file.read(_CHUNK_BYTES):
            size += len(chunk)
            if size > settings.max_upload_bytes:
                break
            out.write(chunk)
    if size > settings.max_upload_bytes:
        dest.unlink(missing_ok=True)
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(status_code=413, detail=f"File exceeds {limit_mb} MB limit.")

    return StoredFile(path=dest, url=_public_url(name), size=size)


def save_bytes(data: bytes, suffix: str = "") -> StoredFile:
    """Write an in-memory payload, e.g. placeholder files for seeded documents."""
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = _generated_name(f"file{suffix}")
    dest = upload_dir / name
    dest.write_bytes(data)
    return StoredFile(path=dest, url=_public_url(name), size=len(data))


def resolve(file_path: str) -> Path | None:
    path = Path(file_path)
    return path if path.is_file() else None


def delete(file_path: str) -> None:
    path = Path(file_path)
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove stored file %s: %s", path, exc)
