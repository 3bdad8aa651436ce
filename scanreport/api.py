from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import requests

from .config import DEFAULT_HOST, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .models import Meta

UPLOAD_OFFER_PATH = "/api/v1/file_upload_offer"
SCAN_FINISHED_PATH = "/api/v1/scan_finished"


class ApiError(RuntimeError):
    pass


class ApiAuthorizationError(ApiError):
    pass


@dataclass(frozen=True)
class FileUploadOfferRequest:
    filename: str
    content_type: str
    content_encoding: str
    checksum: str
    byte_size: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "filename": self.filename,
            "content_type": self.content_type,
            "content_encoding": self.content_encoding,
            "checksum": self.checksum,
            "byte_size": self.byte_size,
        }


@dataclass(frozen=True)
class FileUploadOffer:
    signed_id: str
    presigned_url: str
    headers: Dict[str, str] = field(default_factory=dict)


class ApiClient:
    def __init__(
        self,
        api_key: str,
        host: str = DEFAULT_HOST,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key.strip()
        self.host = host.rstrip("/")
        self.user_agent = user_agent.strip() or DEFAULT_USER_AGENT
        self.timeout = timeout
        self.session = requests.Session()

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"Network error contacting {url}: {exc}") from exc

        if resp.status_code == 401:
            raise ApiAuthorizationError("API key unauthorized for this operation (401).")
        if resp.status_code >= 400:
            raise ApiError(f"API error {resp.status_code}: {resp.text[:200]}")
        return resp

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        headers = kwargs.pop("headers", {})
        headers.setdefault("Authorization", self.api_key)
        headers.setdefault("User-Agent", self.user_agent)
        return self._send(method, f"{self.host}{path}", headers=headers, **kwargs)

    def fetch_upload_url(self, offer_request: FileUploadOfferRequest) -> FileUploadOffer:
        resp = self._request("post", UPLOAD_OFFER_PATH, json=offer_request.to_dict())
        try:
            data = resp.json()
        except ValueError as exc:
            raise ApiError(f"Upload offer was not JSON: {resp.text[:200]}") from exc
        if not isinstance(data, dict):
            raise ApiError(f"Upload offer was not a JSON object: {resp.text[:200]}")
        signed_id = data.get("signed_id")
        presigned_url = data.get("presigned_url")
        if not signed_id or not presigned_url:
            raise ApiError("Upload offer did not include a signed id and upload URL.")
        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise ApiError("Upload offer headers were not a JSON object.")
        return FileUploadOffer(
            signed_id=str(signed_id),
            presigned_url=str(presigned_url),
            headers={str(k): str(v) for k, v in headers.items()},
        )

    def put_file(self, url: str, body: bytes, headers: Dict[str, str]) -> None:
        # presigned URLs carry their own credentials
        self._send("put", url, data=body, headers=dict(headers))

    def scan_finished(self, meta: Meta) -> None:
        self._request("post", SCAN_FINISHED_PATH, json=meta.to_dict())
