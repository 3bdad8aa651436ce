from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol

if TYPE_CHECKING:
    from .api import ApiClient


@dataclass(frozen=True)
class SeverityMeta:
    rule_severity: str = ""
    sensitive_data_categories: List[str] = field(default_factory=list)
    has_local_data_types: Optional[bool] = None
    sensitive_data_category_weighting: int = 0
    rule_severity_weighting: int = 0
    trigger_weighting: int = 0
    display_extras: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule_severity": self.rule_severity,
            "sensitive_data_categories": list(self.sensitive_data_categories),
            "has_local_data_types": self.has_local_data_types,
            "sensitive_data_category_weighting": self.sensitive_data_category_weighting,
            "rule_severity_weighting": self.rule_severity_weighting,
            "trigger_weighting": self.trigger_weighting,
            "display_extras": list(self.display_extras),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SeverityMeta:
        return cls(
            rule_severity=str(data.get("rule_severity") or ""),
            sensitive_data_categories=list(data.get("sensitive_data_categories") or []),
            has_local_data_types=data.get("has_local_data_types"),
            sensitive_data_category_weighting=int(data.get("sensitive_data_category_weighting") or 0),
            rule_severity_weighting=int(data.get("rule_severity_weighting") or 0),
            trigger_weighting=int(data.get("trigger_weighting") or 0),
            display_extras=list(data.get("display_extras") or []),
        )


@dataclass(frozen=True)
class IgnoreMeta:
    ignored_at: str
    author: Optional[str] = None
    comment: Optional[str] = None
    false_positive: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "ignored_at": self.ignored_at,
            "author": self.author,
            "comment": self.comment,
            "false_positive": self.false_positive,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IgnoreMeta:
        return cls(
            ignored_at=str(data.get("ignored_at") or ""),
            author=data.get("author"),
            comment=data.get("comment"),
            false_positive=bool(data.get("false_positive", False)),
        )


@dataclass(frozen=True)
class Finding:
    rule_id: str
    title: str
    severity: str
    filename: str
    line_number: int
    fingerprint: str
    description: str = ""
    documentation_url: str = ""
    full_filename: str = ""
    code_extract: str = ""
    severity_meta: SeverityMeta = field(default_factory=SeverityMeta)

    def get_finding(self) -> Finding:
        return self

    def get_ignore_meta(self) -> Optional[IgnoreMeta]:
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.rule_id,
            "title": self.title,
            "description": self.description,
            "documentation_url": self.documentation_url,
            "severity": self.severity,
            "filename": self.filename,
            "full_filename": self.full_filename,
            "line_number": self.line_number,
            "fingerprint": self.fingerprint,
            "code_extract": self.code_extract,
            "severity_meta": self.severity_meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Finding:
        return cls(
            rule_id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            severity=str(data.get("severity") or ""),
            filename=str(data.get("filename") or ""),
            line_number=int(data.get("line_number") or 0),
            fingerprint=str(data.get("fingerprint") or ""),
            description=str(data.get("description") or ""),
            documentation_url=str(data.get("documentation_url") or ""),
            full_filename=str(data.get("full_filename") or ""),
            code_extract=str(data.get("code_extract") or ""),
            severity_meta=SeverityMeta.from_dict(data.get("severity_meta") or {}),
        )


@dataclass(frozen=True)
class IgnoredFinding:
    finding: Finding
    ignore_meta: IgnoreMeta

    def get_finding(self) -> Finding:
        return self.finding

    def get_ignore_meta(self) -> Optional[IgnoreMeta]:
        return self.ignore_meta


class GenericFinding(Protocol):
    """Anything the translator can turn into a wire finding."""

    def get_finding(self) -> Finding: ...

    def get_ignore_meta(self) -> Optional[IgnoreMeta]: ...


@dataclass(frozen=True)
class SaasFinding:
    finding: Finding
    severity_meta: SeverityMeta
    ignore_meta: Optional[IgnoreMeta] = None

    def to_dict(self) -> Dict[str, object]:
        # finding fields sit at the top level of the wire record
        payload = self.finding.to_dict()
        payload["severity_meta"] = self.severity_meta.to_dict()
        if self.ignore_meta is not None:
            payload["ignore_meta"] = self.ignore_meta.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SaasFinding:
        finding = Finding.from_dict(data)
        ignore_raw = data.get("ignore_meta")
        return cls(
            finding=finding,
            severity_meta=finding.severity_meta,
            ignore_meta=IgnoreMeta.from_dict(ignore_raw) if ignore_raw else None,
        )


@dataclass
class Meta:
    """Identity of the scanned repository as sent to the collector."""

    target: str
    found_languages: Dict[str, int] = field(default_factory=dict)
    id: str = ""
    host: str = ""
    username: str = ""
    name: str = ""
    full_name: str = ""
    url: str = ""
    sha: str = ""
    current_branch: str = ""
    default_branch: str = ""
    diff_base_branch: str = ""
    bearer_rules_version: str = ""
    bearer_version: str = ""
    signed_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "host": self.host,
            "username": self.username,
            "name": self.name,
            "full_name": self.full_name,
            "url": self.url,
            "target": self.target,
            "sha": self.sha,
            "current_branch": self.current_branch,
            "default_branch": self.default_branch,
            "diff_base_branch": self.diff_base_branch,
            "bearer_rules_version": self.bearer_rules_version,
            "bearer_version": self.bearer_version,
            "found_languages": dict(self.found_languages),
            "signed_id": self.signed_id,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Meta:
        return cls(
            target=str(data.get("target") or ""),
            found_languages=dict(data.get("found_languages") or {}),
            id=str(data.get("id") or ""),
            host=str(data.get("host") or ""),
            username=str(data.get("username") or ""),
            name=str(data.get("name") or ""),
            full_name=str(data.get("full_name") or ""),
            url=str(data.get("url") or ""),
            sha=str(data.get("sha") or ""),
            current_branch=str(data.get("current_branch") or ""),
            default_branch=str(data.get("default_branch") or ""),
            diff_base_branch=str(data.get("diff_base_branch") or ""),
            bearer_rules_version=str(data.get("bearer_rules_version") or ""),
            bearer_version=str(data.get("bearer_version") or ""),
            signed_id=data.get("signed_id"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class Dataflow:
    data_types: List[Dict[str, Any]] = field(default_factory=list)
    components: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dataflow:
        return cls(
            data_types=_json_list(data, "data_types"),
            components=_json_list(data, "components"),
            errors=_json_list(data, "errors"),
        )


def _json_list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"dataflow '{key}' must be a list, got {type(value).__name__}")
    return list(value)


@dataclass(frozen=True)
class Report:
    meta: Meta
    findings: Dict[str, List[SaasFinding]]
    ignored_findings: Dict[str, List[SaasFinding]]
    data_types: List[Dict[str, Any]]
    components: List[Dict[str, Any]]
    errors: List[Dict[str, Any]]
    files: List[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "meta": self.meta.to_dict(),
            "findings": _findings_to_dict(self.findings),
            "ignored_findings": _findings_to_dict(self.ignored_findings),
            "data_types": list(self.data_types),
            "components": list(self.components),
            "errors": list(self.errors),
            "files": list(self.files),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Report:
        return cls(
            meta=Meta.from_dict(data.get("meta") or {}),
            findings=_findings_from_dict(data.get("findings") or {}),
            ignored_findings=_findings_from_dict(data.get("ignored_findings") or {}),
            data_types=list(data.get("data_types") or []),
            components=list(data.get("components") or []),
            errors=list(data.get("errors") or []),
            files=[str(f) for f in data.get("files") or []],
        )


def _findings_to_dict(findings: Mapping[str, List[SaasFinding]]) -> Dict[str, object]:
    return {severity: [f.to_dict() for f in items] for severity, items in findings.items()}


def _findings_from_dict(data: Mapping[str, Any]) -> Dict[str, List[SaasFinding]]:
    return {str(severity): [SaasFinding.from_dict(f) for f in items] for severity, items in data.items()}


@dataclass
class ReportData:
    found_languages: Dict[str, int] = field(default_factory=dict)
    findings_by_severity: Dict[str, List[Finding]] = field(default_factory=dict)
    ignored_findings_by_severity: Dict[str, List[IgnoredFinding]] = field(default_factory=dict)
    dataflow: Dataflow = field(default_factory=Dataflow)
    files: List[str] = field(default_factory=list)
    saas_report: Optional[Report] = None


@dataclass(frozen=True)
class PackagedArtifact:
    tmp_dir: str
    path: str


@dataclass
class ScanSession:
    """Per-scan state shared with the report delivery pipeline."""

    api: ApiClient
    error: Optional[str] = None
