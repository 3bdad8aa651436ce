from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import Settings
from .errors import ReportAssemblyError, ReportError
from .gitcontext import GitContext
from .metadata import degraded_meta, resolve_meta
from .models import Dataflow, Finding, IgnoredFinding, IgnoreMeta, Meta, Report, ReportData, SaasFinding
from .translate import translate_findings_by_severity


def get_report(
    report_data: ReportData,
    settings: Settings,
    git_context: Optional[GitContext],
    ensure_meta: bool,
) -> Report:
    """Build the collector report and store it on ``report_data.saas_report``.

    With ``ensure_meta`` unset, missing git information degrades the
    identity to the scan target and detected languages instead of failing.
    """
    try:
        meta = resolve_meta(report_data, settings, git_context)
    except ReportError:
        if ensure_meta:
            raise
        meta = degraded_meta(report_data, settings)

    try:
        findings = translate_findings_by_severity(report_data.findings_by_severity)
        ignored_findings = translate_findings_by_severity(report_data.ignored_findings_by_severity)
    except (AttributeError, TypeError) as exc:
        raise ReportAssemblyError(f"could not translate findings: {exc}") from exc

    report = assemble_report(
        meta,
        findings,
        ignored_findings,
        report_data.dataflow,
        discovered_files(settings.target, _list_field("files", report_data.files)),
    )
    report_data.saas_report = report
    return report


def assemble_report(
    meta: Meta,
    findings: Dict[str, List[SaasFinding]],
    ignored_findings: Dict[str, List[SaasFinding]],
    dataflow: Dataflow,
    files: List[str],
) -> Report:
    return Report(
        meta=meta,
        findings=_findings_field("findings", findings),
        ignored_findings=_findings_field("ignored_findings", ignored_findings),
        data_types=_list_field("data_types", dataflow.data_types),
        components=_list_field("components", dataflow.components),
        errors=_list_field("errors", dataflow.errors),
        files=_list_field("files", files),
    )


def _list_field(name: str, source: Any) -> List[Any]:
    if isinstance(source, list):
        return list(source)
    if not source:
        return []
    raise ReportAssemblyError(f"report field '{name}' expected a list, got {type(source).__name__}")


def _findings_field(name: str, source: Any) -> Dict[str, List[SaasFinding]]:
    if not source:
        return {}
    if not isinstance(source, Mapping):
        raise ReportAssemblyError(f"report field '{name}' expected a mapping, got {type(source).__name__}")
    checked: Dict[str, List[SaasFinding]] = {}
    for severity, items in source.items():
        if not isinstance(items, list) or not all(isinstance(item, SaasFinding) for item in items):
            raise ReportAssemblyError(f"report field '{name}' has malformed entries for severity '{severity}'")
        checked[severity] = list(items)
    return checked


def _strip_dot_slash(path: str) -> str:
    return path[2:] if path.startswith("./") else path


def full_filename(target: str, filename: str) -> str:
    base = _strip_dot_slash(target)
    if not base:
        return filename
    if filename in ("", "."):
        return base
    if base == _strip_dot_slash(filename):
        # single file scan: the target already names the file
        return base
    return posixpath.normpath(posixpath.join(base, filename))


def discovered_files(target: str, files: Iterable[str]) -> List[str]:
    return [full_filename(target, name) for name in files]


def _severity_groups(raw: Any, key: str) -> Dict[str, List[Mapping[str, Any]]]:
    if not isinstance(raw, dict):
        raise ValueError(f"'{key}' must be an object of severity lists")
    for severity, items in raw.items():
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise ValueError(f"'{key}.{severity}' must be a list of finding objects")
    return raw


def _finding_from_dict(item: Mapping[str, Any], key: str) -> Finding:
    try:
        return Finding.from_dict(item)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"invalid finding in '{key}': {exc}") from exc


def _load_findings(raw: Any) -> Dict[str, List[Finding]]:
    groups = _severity_groups(raw, "findings")
    return {str(severity): [_finding_from_dict(item, "findings") for item in items] for severity, items in groups.items()}


def _load_ignored_findings(raw: Any) -> Dict[str, List[IgnoredFinding]]:
    loaded: Dict[str, List[IgnoredFinding]] = {}
    for severity, items in _severity_groups(raw, "ignored_findings").items():
        for item in items:
            ignore_raw = item.get("ignore_meta")
            if not ignore_raw:
                raise ValueError(f"ignored finding without ignore_meta: {item.get('fingerprint')}")
            if not isinstance(ignore_raw, dict):
                raise ValueError(f"'ignored_findings.{severity}' has a non-object ignore_meta")
            loaded.setdefault(str(severity), []).append(
                IgnoredFinding(
                    finding=_finding_from_dict(item, "ignored_findings"),
                    ignore_meta=IgnoreMeta.from_dict(ignore_raw),
                )
            )
    return loaded


def load_report_data(path: Path) -> ReportData:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"report data must be a JSON object: {path}")
    languages = data.get("found_languages") or {}
    dataflow = data.get("dataflow") or {}
    files = data.get("files") or []
    if not isinstance(languages, dict):
        raise ValueError("'found_languages' must be an object")
    if not isinstance(dataflow, dict):
        raise ValueError("'dataflow' must be an object")
    if not isinstance(files, list):
        raise ValueError("'files' must be a list")
    return ReportData(
        found_languages=dict(languages),
        findings_by_severity=_load_findings(data.get("findings") or {}),
        ignored_findings_by_severity=_load_ignored_findings(data.get("ignored_findings") or {}),
        dataflow=Dataflow.from_dict(dataflow),
        files=[str(f) for f in files],
    )
