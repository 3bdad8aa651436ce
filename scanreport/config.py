from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

VERSION = "1.4.0"
DEFAULT_HOST = "https://my.bearer.sh"
DEFAULT_USER_AGENT = f"scanreport/{VERSION}"
DEFAULT_TIMEOUT_SECONDS = 30.0

API_KEY_ENV_VARS = ("BEARER_API_KEY", "BEARER_TOKEN")
HOST_ENV_VAR = "BEARER_HOST"


@dataclass(frozen=True)
class Settings:
    target: str
    rules_version: str = ""
    host: str = DEFAULT_HOST
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    verbose: bool = False


def resolve_api_key(explicit: str | None, environ: Optional[Mapping[str, str]] = None) -> str | None:
    if explicit and explicit.strip():
        return explicit.strip()
    env = os.environ if environ is None else environ
    for key in API_KEY_ENV_VARS:
        value = env.get(key, "")
        if value.strip():
            return value.strip()
    return None


def resolve_host(explicit: str | None, environ: Optional[Mapping[str, str]] = None) -> str:
    if explicit and explicit.strip():
        return explicit.strip().rstrip("/")
    env = os.environ if environ is None else environ
    value = env.get(HOST_ENV_VAR, "").strip()
    return (value or DEFAULT_HOST).rstrip("/")
