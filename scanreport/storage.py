from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from pathlib import Path

from .api import ApiClient, FileUploadOffer, FileUploadOfferRequest


@dataclass(frozen=True)
class UploadRequest:
    api: ApiClient
    file_path: str
    file_prefix: str
    content_type: str
    content_encoding: str


def _md5_base64(body: bytes) -> str:
    return base64.b64encode(hashlib.md5(body).digest()).decode("ascii")


def upload_file(request: UploadRequest) -> FileUploadOffer:
    """Ask the collector for an upload slot, then PUT the file into it."""
    path = Path(request.file_path)
    body = path.read_bytes()
    checksum = _md5_base64(body)

    offer = request.api.fetch_upload_url(
        FileUploadOfferRequest(
            filename=f"{request.file_prefix}_{path.name}",
            content_type=request.content_type,
            content_encoding=request.content_encoding,
            checksum=checksum,
            byte_size=len(body),
        )
    )

    headers = {
        "Content-Type": request.content_type,
        "Content-Encoding": request.content_encoding,
        "Content-MD5": checksum,
    }
    headers.update(offer.headers)
    request.api.put_file(offer.presigned_url, body, headers)
    return offer
