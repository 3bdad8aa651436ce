"""Report assembly and strict/degraded metadata handling."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from scanreport.errors import IncompleteRepositoryMetadata, NotAGitRepository, ReportAssemblyError
from scanreport.models import Dataflow, Meta
from scanreport.report import (
    assemble_report,
    discovered_files,
    full_filename,
    get_report,
    load_report_data,
)


def test_strict_mode_without_git_context_fails(report_data, settings) -> None:
    with pytest.raises(NotAGitRepository):
        get_report(report_data, settings, None, ensure_meta=True)
    assert report_data.saas_report is None


def test_non_strict_mode_degrades_metadata(report_data, settings) -> None:
    report = get_report(report_data, settings, None, ensure_meta=False)

    assert report_data.saas_report is report
    assert report.meta == Meta(target="./project", found_languages={"Ruby": 120, "JavaScript": 30})


def test_non_strict_mode_degrades_incomplete_context(report_data, settings, git_context) -> None:
    context = replace(git_context, commit_hash="")
    with pytest.raises(IncompleteRepositoryMetadata):
        get_report(report_data, settings, context, ensure_meta=True)

    report = get_report(report_data, settings, context, ensure_meta=False)
    assert report.meta.sha == ""
    assert report.meta.current_branch == ""


def test_full_report_contents(report_data, settings, git_context) -> None:
    report = get_report(report_data, settings, git_context, ensure_meta=True)

    assert report.meta.sha == "3f1c2b7"
    assert [f.finding.fingerprint for f in report.findings["high"]] == ["fp-a", "fp-b"]
    assert report.ignored_findings["low"][0].ignore_meta.comment == "test fixture only"
    assert report.data_types == [{"name": "Email Address", "detectors": []}]
    assert report.components == [{"name": "PostgreSQL", "type": "data_store"}]
    assert report.errors == [{"file": "broken.rb", "error": "parse error"}]
    assert report.files == ["project/app/models.rb", "project/config/app.rb"]


@pytest.mark.parametrize(
    ("target", "filename", "expected"),
    [
        (".", "app/models.rb", "app/models.rb"),
        ("./src", "lib/a.py", "src/lib/a.py"),
        ("/abs/repo", "./lib/a.py", "/abs/repo/lib/a.py"),
        ("", "lib/a.py", "lib/a.py"),
        ("/abs/repo", ".", "/abs/repo"),
        ("single.py", "single.py", "single.py"),
        ("./single.py", "./single.py", "single.py"),
    ],
)
def test_full_filename(target: str, filename: str, expected: str) -> None:
    assert full_filename(target, filename) == expected


def test_discovered_files_keeps_order() -> None:
    assert discovered_files("repo", ["b.rb", "a.rb"]) == ["repo/b.rb", "repo/a.rb"]


@pytest.mark.parametrize("field", ["data_types", "components", "errors"])
def test_assembly_rejects_dict_shaped_dataflow(field: str) -> None:
    dataflow = Dataflow(**{field: {"Email Address": {"detectors": [{"name": "ruby"}]}}})

    with pytest.raises(ReportAssemblyError, match=field):
        assemble_report(Meta(target="."), {}, {}, dataflow, [])


def test_assembly_accepts_empty_sources_of_any_shape() -> None:
    report = assemble_report(Meta(target="."), {}, {}, Dataflow(data_types={}), [])

    assert report.data_types == []


def test_assembly_rejects_malformed_findings_map() -> None:
    with pytest.raises(ReportAssemblyError, match="ignored_findings"):
        assemble_report(Meta(target="."), {}, {"low": ({"fingerprint": "fp"},)}, Dataflow(), [])

    with pytest.raises(ReportAssemblyError, match="findings"):
        assemble_report(Meta(target="."), [("high", [])], {}, Dataflow(), [])


def test_untranslatable_finding_is_an_assembly_error(report_data, settings) -> None:
    report_data.findings_by_severity = {"high": [{"fingerprint": "not-a-finding"}]}

    with pytest.raises(ReportAssemblyError, match="translate"):
        get_report(report_data, settings, None, ensure_meta=False)
    assert report_data.saas_report is None


def test_files_must_be_a_list(report_data, settings) -> None:
    report_data.files = {"app.rb": 1}

    with pytest.raises(ReportAssemblyError, match="files"):
        get_report(report_data, settings, None, ensure_meta=False)


def test_load_report_data(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            {
                "found_languages": {"Go": 3},
                "findings": {
                    "critical": [
                        {"id": "go_sql_injection", "title": "SQL injection", "severity": "critical",
                         "filename": "main.go", "line_number": 7, "fingerprint": "fp-1"}
                    ]
                },
                "ignored_findings": {
                    "low": [
                        {"id": "go_weak_hash", "title": "Weak hash", "severity": "low",
                         "filename": "hash.go", "line_number": 2, "fingerprint": "fp-2",
                         "ignore_meta": {"ignored_at": "2026-10-02T08:00:00Z", "comment": "legacy"}}
                    ]
                },
                "dataflow": {"components": [{"name": "S3"}]},
                "files": ["main.go", "hash.go"],
            }
        ),
        encoding="utf-8",
    )

    data = load_report_data(path)

    assert data.found_languages == {"Go": 3}
    assert data.findings_by_severity["critical"][0].line_number == 7
    ignored = data.ignored_findings_by_severity["low"][0]
    assert ignored.get_ignore_meta().comment == "legacy"
    assert ignored.get_finding().fingerprint == "fp-2"
    assert data.dataflow.components == [{"name": "S3"}]
    assert data.dataflow.data_types == []
    assert data.files == ["main.go", "hash.go"]


def test_load_report_data_rejects_ignored_finding_without_meta(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"ignored_findings": {"low": [{"fingerprint": "fp"}]}}), encoding="utf-8")

    with pytest.raises(ValueError, match="ignore_meta"):
        load_report_data(path)


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"findings": "x"}, "findings"),
        ({"findings": {"high": ["s"]}}, "findings.high"),
        ({"ignored_findings": {"low": [{"fingerprint": "fp", "ignore_meta": "yes"}]}}, "ignore_meta"),
        ({"findings": {"high": [{"fingerprint": "fp", "severity_meta": "bad"}]}}, "invalid finding"),
        ({"dataflow": {"data_types": {"Email": {}}}}, "data_types"),
        ({"dataflow": ["components"]}, "dataflow"),
        ({"files": "app.py"}, "files"),
        ({"found_languages": ["Go"]}, "found_languages"),
    ],
)
def test_load_report_data_rejects_malformed_shapes(tmp_path: Path, payload: dict, message: str) -> None:
    path = tmp_path / "data.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_report_data(path)
