from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

ENV_OVERRIDES = {
    "branch": "BEARER_BRANCH",
    "default_branch": "BEARER_DEFAULT_BRANCH",
    "commit_hash": "BEARER_COMMIT",
    "origin_url": "BEARER_REPOSITORY_URL",
}


@dataclass(frozen=True)
class GitContext:
    id: str = ""
    host: str = ""
    owner: str = ""
    name: str = ""
    full_name: str = ""
    origin_url: str = ""
    commit_hash: str = ""
    branch: str = ""
    default_branch: str = ""
    base_branch: str = ""


def apply_env_overrides(
    context: Optional[GitContext],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[GitContext]:
    """Let BEARER_* variables supply values git could not determine.

    Returns None only when there is neither a context nor any override.
    """
    env = os.environ if environ is None else environ
    overrides = {}
    for attr, key in ENV_OVERRIDES.items():
        value = env.get(key, "").strip()
        if value:
            overrides[attr] = value
    if context is None:
        if not overrides:
            return None
        context = GitContext()
    return replace(context, **overrides)


def load_git_context(path: Path) -> GitContext:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"git context must be a JSON object: {path}")
    return GitContext(
        id=str(data.get("id") or ""),
        host=str(data.get("host") or ""),
        owner=str(data.get("owner") or ""),
        name=str(data.get("name") or ""),
        full_name=str(data.get("full_name") or ""),
        origin_url=str(data.get("origin_url") or ""),
        commit_hash=str(data.get("commit_hash") or ""),
        branch=str(data.get("branch") or ""),
        default_branch=str(data.get("default_branch") or ""),
        base_branch=str(data.get("base_branch") or ""),
    )
