import logging
import os
import tempfile
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

import aiofiles
import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from config import UPLOAD_TIMEOUT_SECONDS
from exceptions import UploadError


logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass
class StagedFile:
    filename: str
    content_type: str
    path: str
    size: int


def configure_storage(credentials: dict) -> None:
    """
    Applies the validated storage credentials, always handing out https urls
    """
    cloudinary.config(**credentials, secure=True)


class BlobUploader:
    """
    Pushes staged payloads to Cloudinary and returns the durable https url.

    Remote objects created here are never tracked or removed afterwards.
    """

    def __init__(self, timeout: int = UPLOAD_TIMEOUT_SECONDS, client=cloudinary.uploader):
        self.timeout = timeout
        self.client = client

    async def upload(self, file: Optional[StagedFile]) -> str:
        if file is None or not file.path:
            raise UploadError("Cloudinary upload failed: Invalid file provided")
        if not os.path.isfile(file.path) or os.path.getsize(file.path) == 0:
            raise UploadError(f"Cloudinary upload failed: {file.filename or file.path} is missing or empty")

        try:
            result = await run_in_threadpool(
                self.client.upload,
                file.path,
                resource_type="auto",
                timeout=self.timeout,
            )
        except Exception as error:
            logger.error(
                "Error in cloudinary upload",
                extra={"upload_name": file.filename, "error_name": type(error).__name__, "error": str(error)},
            )
            raise UploadError(f"Cloudinary upload failed: {error}", diagnostics={"provider": str(error)}) from error

        url = (result or {}).get("secure_url")
        if not url or not url.startswith("https://"):
            raise UploadError("Cloudinary upload failed: Failed to get upload URL from Cloudinary")

        logger.info("Asset uploaded", extra={"upload_name": file.filename, "url": url})
        return url


async def stage_upload(file: Optional[UploadFile], directory: Optional[str] = None) -> Optional[StagedFile]:
    """
    Writes an incoming multipart file to a temp file so the uploader can stream it from disk
    """
    if file is None:
        return None
    directory = directory or tempfile.gettempdir()
    suffix = os.path.splitext(file.filename or "")[1]
    path = os.path.join(directory, f"{uuid.uuid4().hex}{suffix}")
    size = 0
    try:
        async with aiofiles.open(path, mode="wb") as f:
            while chunk := await file.read(CHUNK_SIZE):
                size += len(chunk)
                await f.write(chunk)
    except Exception:
        if os.path.exists(path):
            os.remove(path)
        raise
    return StagedFile(
        filename=file.filename or "",
        content_type=file.content_type or "",
        path=path,
        size=size,
    )


def discard_staged(files: Iterable[Optional[StagedFile]]) -> None:
    for staged in files:
        if staged is None:
            continue
        try:
            os.remove(staged.path)
        except FileNotFoundError:
            pass
