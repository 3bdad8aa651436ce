"""Shared fixtures for the report delivery tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from scanreport.api import ApiError, FileUploadOffer, FileUploadOfferRequest
from scanreport.config import Settings
from scanreport.gitcontext import GitContext
from scanreport.models import Dataflow, Finding, IgnoredFinding, IgnoreMeta, Meta, ReportData, SeverityMeta


def make_finding(fingerprint: str, severity: str = "high", filename: str = "app/models.rb") -> Finding:
    return Finding(
        rule_id="ruby_lang_logger_leak",
        title="Leakage of sensitive data in logger message",
        severity=severity,
        filename=filename,
        line_number=12,
        fingerprint=fingerprint,
        description="Sensitive data should not be logged.",
        full_filename=filename,
        code_extract='logger.info(user.email)',
        severity_meta=SeverityMeta(
            rule_severity=severity,
            sensitive_data_categories=["Personal Data"],
            has_local_data_types=True,
            rule_severity_weighting=5,
            trigger_weighting=2,
        ),
    )


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeApi:
    def __init__(
        self,
        offer_error: Optional[Exception] = None,
        put_error: Optional[Exception] = None,
        finish_error: Optional[Exception] = None,
    ):
        self.offer_error = offer_error
        self.put_error = put_error
        self.finish_error = finish_error
        self.offer_requests: List[FileUploadOfferRequest] = []
        self.uploads: List[tuple[str, bytes, Dict[str, str]]] = []
        self.finished: List[Meta] = []

    def fetch_upload_url(self, offer_request: FileUploadOfferRequest) -> FileUploadOffer:
        self.offer_requests.append(offer_request)
        if self.offer_error is not None:
            raise self.offer_error
        return FileUploadOffer(signed_id="signed-123", presigned_url="https://storage.test/upload")

    def put_file(self, url: str, body: bytes, headers: Dict[str, str]) -> None:
        if self.put_error is not None:
            raise self.put_error
        self.uploads.append((url, body, headers))

    def scan_finished(self, meta: Meta) -> None:
        if self.finish_error is not None:
            raise self.finish_error
        self.finished.append(meta)


@pytest.fixture
def settings() -> Settings:
    return Settings(target="./project", rules_version="v0.33.1")


@pytest.fixture
def git_context() -> GitContext:
    return GitContext(
        id="42",
        host="github.com",
        owner="acme",
        name="shop",
        full_name="acme/shop",
        origin_url="https://github.com/acme/shop.git",
        commit_hash="3f1c2b7",
        branch="feature/login",
        default_branch="main",
        base_branch="main",
    )


@pytest.fixture
def report_data() -> ReportData:
    ignored = IgnoredFinding(
        finding=make_finding("fp-c", severity="low"),
        ignore_meta=IgnoreMeta(
            ignored_at="2026-10-01T10:00:00Z",
            author="dana",
            comment="test fixture only",
            false_positive=True,
        ),
    )
    return ReportData(
        found_languages={"Ruby": 120, "JavaScript": 30},
        findings_by_severity={"high": [make_finding("fp-a"), make_finding("fp-b")]},
        ignored_findings_by_severity={"low": [ignored]},
        dataflow=Dataflow(
            data_types=[{"name": "Email Address", "detectors": []}],
            components=[{"name": "PostgreSQL", "type": "data_store"}],
            errors=[{"file": "broken.rb", "error": "parse error"}],
        ),
        files=["app/models.rb", "./config/app.rb"],
    )


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def failing_offer_api() -> FakeApi:
    return FakeApi(offer_error=ApiError("API error 500: boom"))
