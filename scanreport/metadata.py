from __future__ import annotations

from typing import List, Optional

from .config import VERSION, Settings
from .errors import IncompleteRepositoryMetadata, NotAGitRepository
from .gitcontext import GitContext
from .models import Meta, ReportData

MISSING_BRANCH = (
    "Couldn't determine the name of the branch being scanned. "
    "Please set the 'BEARER_BRANCH' environment variable."
)
MISSING_DEFAULT_BRANCH = (
    "Couldn't determine the default branch of the repository. "
    "Please set the 'BEARER_DEFAULT_BRANCH' environment variable."
)
MISSING_COMMIT = (
    "Couldn't determine the hash of the current commit of the repository. "
    "Please set the 'BEARER_COMMIT' environment variable."
)
MISSING_ORIGIN_URL = (
    "Couldn't determine the origin URL of the repository. "
    "Please set the 'BEARER_REPOSITORY_URL' environment variable."
)


def _missing_fields(context: GitContext) -> List[str]:
    messages: List[str] = []
    if not context.branch:
        messages.append(MISSING_BRANCH)
    if not context.default_branch:
        messages.append(MISSING_DEFAULT_BRANCH)
    if not context.commit_hash:
        messages.append(MISSING_COMMIT)
    if not context.origin_url:
        messages.append(MISSING_ORIGIN_URL)
    return messages


def resolve_meta(
    report_data: ReportData,
    settings: Settings,
    git_context: Optional[GitContext],
) -> Meta:
    if git_context is None:
        raise NotAGitRepository()

    messages = _missing_fields(git_context)
    if messages:
        raise IncompleteRepositoryMetadata(messages)

    return Meta(
        id=git_context.id,
        host=git_context.host,
        username=git_context.owner,
        name=git_context.name,
        full_name=git_context.full_name,
        url=git_context.origin_url,
        target=settings.target,
        sha=git_context.commit_hash,
        current_branch=git_context.branch,
        default_branch=git_context.default_branch,
        diff_base_branch=git_context.base_branch,
        bearer_rules_version=settings.rules_version,
        bearer_version=VERSION,
        found_languages=dict(report_data.found_languages),
    )


def degraded_meta(report_data: ReportData, settings: Settings) -> Meta:
    return Meta(target=settings.target, found_languages=dict(report_data.found_languages))
