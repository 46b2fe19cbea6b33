"""
Upload staging for the media analysis endpoints.

- Checks the declared MIME type against a per-modality allow-list.
- Streams the body to the staging directory in chunks, enforcing the size
  limit while reading so oversized files never fully land on disk.
- Deletes the staged file once the caller is done with it, or on error.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple

from fastapi import UploadFile

from guardian.core.config import get_settings
from guardian.core.errors import InvalidInput
from guardian.core.logger import get_logger
from guardian.services import playbook

log = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class UploadPolicy:
    modality: str
    allowed_types: Tuple[str, ...]
    type_names: str
    max_bytes: int

    @property
    def limit_label(self) -> str:
        return f"{self.max_bytes // (1024 * 1024)}MB"


def policy_for(modality: str) -> UploadPolicy:
    settings = get_settings()
    if modality == playbook.IMAGE:
        return UploadPolicy(
            modality,
            ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"),
            "JPG, PNG, GIF, or WEBP",
            settings.MAX_IMAGE_BYTES,
        )
    if modality == playbook.AUDIO:
        return UploadPolicy(
            modality,
            ("audio/mpeg", "audio/mp3", "audio/wav", "audio/webm", "audio/ogg", "audio/m4a"),
            "MP3, WAV, WEBM, OGG, or M4A",
            settings.MAX_AUDIO_BYTES,
        )
    if modality == playbook.VIDEO:
        return UploadPolicy(
            modality,
            ("video/mp4", "video/quicktime", "video/x-msvideo", "video/webm"),
            "MP4, MOV, AVI, or WEBM",
            settings.MAX_VIDEO_BYTES,
        )
    raise ValueError(f"No upload policy for {modality!r}")


@dataclass(frozen=True)
class StagedUpload:
    path: Path
    mime_type: str
    size: int
    filename: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def _too_large(policy: UploadPolicy) -> InvalidInput:
    return InvalidInput(
        f"File size exceeds {policy.limit_label} limit",
        risks=["File upload error"],
        actions=[f"Please upload a file under {policy.limit_label}"],
    )


def validate_upload(file: Optional[UploadFile], policy: UploadPolicy) -> str:
    """Check presence, MIME type and (when known) size. Returns the MIME type."""
    if file is None:
        article = "an" if policy.modality[0] in "aeiou" else "a"
        raise InvalidInput(
            f"No {policy.modality} file provided",
            risks=["No file uploaded"],
            actions=[f"Please upload {article} {policy.modality} file"],
        )
    mime_type = (file.content_type or "").split(";", 1)[0].strip().lower()
    if mime_type not in policy.allowed_types:
        raise InvalidInput(
            f"Invalid file type. Please upload {policy.type_names}",
            risks=["File upload error"],
            actions=[f"Please upload a valid {policy.modality} file"],
            extra_info={"content_type": mime_type},
        )
    if file.size is not None and file.size > policy.max_bytes:
        raise _too_large(policy)
    return mime_type


async def stage_upload(file: UploadFile, policy: UploadPolicy,
                       directory: Optional[Path] = None) -> StagedUpload:
    mime_type = validate_upload(file, policy)
    base = Path(directory or get_settings().UPLOAD_DIR)
    base.mkdir(parents=True, exist_ok=True)
    dest = base / f"{policy.modality}-{uuid.uuid4().hex}{Path(file.filename or '').suffix}"

    size = 0
    try:
        with dest.open("wb") as f:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > policy.max_bytes:
                    raise _too_large(policy)
                f.write(chunk)
    except BaseException:
        dest.unlink(missing_ok=True)
        raise

    if size == 0:
        dest.unlink(missing_ok=True)
        raise InvalidInput(
            f"Uploaded {policy.modality} file is empty",
            risks=["File upload error"],
            actions=[f"Please upload a valid {policy.modality} file"],
        )
    return StagedUpload(path=dest, mime_type=mime_type, size=size, filename=file.filename or "")


@asynccontextmanager
async def staged(file: Optional[UploadFile], policy: UploadPolicy,
                 directory: Optional[Path] = None) -> AsyncIterator[StagedUpload]:
    """Stage an upload for the duration of the block, then delete it."""
    upload = await stage_upload(file, policy, directory)  # type: ignore[arg-type]
    try:
        yield upload
    finally:
        try:
            upload.path.unlink(missing_ok=True)
        except OSError:
            log.exception("Failed to delete staged upload %s", upload.path)
