from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .models import GenericFinding, SaasFinding


def translate_findings_by_severity(
    findings_by_severity: Mapping[str, Sequence[GenericFinding]],
) -> Dict[str, List[SaasFinding]]:
    translated: Dict[str, List[SaasFinding]] = {}
    for severity, items in findings_by_severity.items():
        for item in items:
            finding = item.get_finding()
            translated.setdefault(severity, []).append(
                SaasFinding(
                    finding=finding,
                    severity_meta=finding.severity_meta,
                    ignore_meta=item.get_ignore_meta(),
                )
            )
    return translated
