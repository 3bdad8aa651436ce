from __future__ import annotations

import os
import shutil
from contextlib import contextmanager
from typing import Iterator, Optional

from .api import ApiClient, ApiError
from .config import Settings
from .console import RichLogger
from .errors import NotificationFailure, PackagingFailure, ReportError, UploadFailure, UploadSlotFailure
from .gitcontext import GitContext
from .models import Meta, PackagedArtifact, Report, ReportData, ScanSession
from .packaging import create_gzip_report
from .report import get_report
from .storage import UploadRequest, upload_file

FILE_PREFIX = "bearer_security_report"
CONTENT_TYPE = "application/json"
CONTENT_ENCODING = "gzip"

METADATA_ERROR = "Unable to calculate Metadata. {}"
COMPRESS_ERROR = "Could not compress report."
UPLOAD_ERROR = "Report upload failed."


@contextmanager
def packaged_report(report: Report) -> Iterator[PackagedArtifact]:
    """Package ``report`` and remove its temporary directory on exit."""
    try:
        artifact = create_gzip_report(report)
    except PackagingFailure as exc:
        if exc.tmp_dir:
            shutil.rmtree(exc.tmp_dir, ignore_errors=True)
        raise
    try:
        yield artifact
    finally:
        shutil.rmtree(artifact.tmp_dir, ignore_errors=True)


def send_report_to_service(api: ApiClient, meta: Meta, artifact: PackagedArtifact) -> None:
    if not os.path.isfile(artifact.path):
        raise UploadSlotFailure(f"report artifact is missing: {artifact.path}")

    try:
        offer = upload_file(
            UploadRequest(
                api=api,
                file_path=artifact.path,
                file_prefix=FILE_PREFIX,
                content_type=CONTENT_TYPE,
                content_encoding=CONTENT_ENCODING,
            )
        )
    except (ApiError, OSError) as exc:
        raise UploadSlotFailure(f"upload of {artifact.path} failed: {exc}") from exc

    meta.signed_id = offer.signed_id

    try:
        api.scan_finished(meta)
    except ApiError as exc:
        raise NotificationFailure(f"scan finished notification failed: {exc}") from exc


def send_report(
    settings: Settings,
    report_data: ReportData,
    git_context: Optional[GitContext],
    session: ScanSession,
    logger: RichLogger,
) -> bool:
    """Deliver the scan report; problems end up on ``session.error``.

    Returns True when the collector accepted the report. Never raises for
    metadata, packaging or upload problems so the scan itself can finish.
    """
    report = report_data.saas_report
    if report is None:
        try:
            report = get_report(report_data, settings, git_context, ensure_meta=True)
        except ReportError as exc:
            message = METADATA_ERROR.format(exc)
            logger.debug(message)
            session.error = message
            return False

    try:
        with packaged_report(report) as artifact:
            logger.debug(f"Report packaged at {artifact.path}")
            try:
                send_report_to_service(session.api, report.meta, artifact)
            except UploadFailure as exc:
                session.error = UPLOAD_ERROR
                logger.debug(f"error sending report to collector: {exc}")
                return False
    except PackagingFailure as exc:
        session.error = COMPRESS_ERROR
        logger.debug(f"error creating report: {exc}")
        return False

    logger.debug(f"Report delivered with signed id {report.meta.signed_id}")
    return True
