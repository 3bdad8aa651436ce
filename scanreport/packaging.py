from __future__ import annotations

import gzip
import json
import os
import tempfile
from pathlib import Path

from .errors import ArtifactCreateFailure, ArtifactWriteFailure, TempDirFailure
from .models import PackagedArtifact, Report

TMP_DIR_PREFIX = "reports"
ARTIFACT_PREFIX = "security-"
ARTIFACT_SUFFIX = ".json.gz"


def report_json(report: Report) -> str:
    return json.dumps(report.to_dict(), ensure_ascii=False)


def decode_report(text: str) -> Report:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("report must be a JSON object")
    return Report.from_dict(data)


def create_gzip_report(report: Report) -> PackagedArtifact:
    """Write the gzipped JSON report into a fresh temporary directory.

    The directory is left in place; removing it is the caller's job.
    """
    try:
        tmp_dir = tempfile.mkdtemp(prefix=TMP_DIR_PREFIX)
    except OSError as exc:
        raise TempDirFailure(f"could not create report directory: {exc}") from exc

    try:
        fd, path = tempfile.mkstemp(prefix=ARTIFACT_PREFIX, suffix=ARTIFACT_SUFFIX, dir=tmp_dir)
    except OSError as exc:
        raise ArtifactCreateFailure(f"could not create report file: {exc}", tmp_dir=tmp_dir) from exc

    try:
        # fdopen owns fd from here, so it is closed on every path
        with os.fdopen(fd, "wb") as raw, gzip.GzipFile(fileobj=raw, mode="wb") as gz:
            gz.write(report_json(report).encode("utf-8"))
    except (OSError, TypeError, ValueError) as exc:
        raise ArtifactWriteFailure(f"could not write report file {path}: {exc}", tmp_dir=tmp_dir) from exc

    return PackagedArtifact(tmp_dir=tmp_dir, path=path)


def read_gzip_report(path: Path) -> Report:
    with gzip.open(path, "rt", encoding="utf-8") as handle:
        return decode_report(handle.read())
