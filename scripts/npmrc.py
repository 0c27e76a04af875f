#!/usr/bin/env python3
# file: scripts/npmrc.py
# version: 1.0.0
# guid: 9d42e1b7-0c6a-4f3e-b85d-2a7f61c3e0d8

"""Line-oriented model and idempotent merge for ~/.npmrc.

The file is parsed into ``NpmrcLine`` entries, each tagged with the directive
kind it was recognised as (scope registry, auth token, or nothing). Merging
is a pure function over that list: stale GitHub Packages directives are
dropped, every other line keeps its position, and the desired scope and
token lines are appended at the end.

Stale lines are recognised by suffix/prefix only, so any scope mapped onto
the same registry URL is replaced, not just the configured organization.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path
from urllib.parse import urlparse

import setup_common

DEFAULT_REGISTRY_URL = "https://npm.pkg.github.com"
DEFAULT_TOKEN_ENV_VAR = "NPM_TOKEN"


class DirectiveKind(Enum):
    """Recognised .npmrc directive shapes."""

    SCOPE_REGISTRY = "scope-registry"
    AUTH_TOKEN = "auth-token"


@dataclass(frozen=True)
class NpmrcLine:
    raw: str
    kind: DirectiveKind | None = None


class MergeAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class MergeResult:
    action: MergeAction
    lines: list[str]

    @property
    def content(self) -> str:
        return render(self.lines)


def registry_host(registry_url: str) -> str:
    """Return the host part of a registry URL, e.g. ``npm.pkg.github.com``."""
    parsed = urlparse(registry_url)
    return parsed.netloc or registry_url.split("//")[-1].strip("/")


def desired_lines(
    org: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
    token_env_var: str = DEFAULT_TOKEN_ENV_VAR,
) -> list[str]:
    """Scope registry line followed by the env-var indirected token line."""
    host = registry_host(registry_url)
    return [
        f"@{org}:registry={registry_url}",
        f"//{host}/:_authToken=${{{token_env_var}}}",
    ]


def classify(line: str, registry_url: str = DEFAULT_REGISTRY_URL) -> DirectiveKind | None:
    if line.endswith(f":registry={registry_url}"):
        return DirectiveKind.SCOPE_REGISTRY
    if line.startswith(f"//{registry_host(registry_url)}/:_authToken="):
        return DirectiveKind.AUTH_TOKEN
    return None


def parse(content: str, registry_url: str = DEFAULT_REGISTRY_URL) -> list[NpmrcLine]:
    """Split file content into non-empty lines tagged with their directive kind."""
    return [
        NpmrcLine(raw=line, kind=classify(line, registry_url))
        for line in content.split("\n")
        if line.strip()
    ]


def merge(
    existing: list[NpmrcLine] | None,
    wanted: list[str],
) -> MergeResult:
    """Compute the file lines that hold exactly one copy of ``wanted``.

    ``existing`` is None when the file does not exist yet.
    """
    if existing is None:
        return MergeResult(MergeAction.CREATE, list(wanted))

    raw_lines = [entry.raw for entry in existing]
    if all(line in raw_lines for line in wanted):
        return MergeResult(MergeAction.UNCHANGED, raw_lines)

    kept = [entry.raw for entry in existing if entry.kind is None]
    return MergeResult(MergeAction.UPDATE, kept + list(wanted))


def render(lines: list[str]) -> str:
    return "\n".join(lines) + "\n"


def plan_npmrc(
    path: Path,
    org: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
    token_env_var: str = DEFAULT_TOKEN_ENV_VAR,
) -> MergeResult:
    """Read ``path`` (if present) and return the merge it needs."""
    wanted = desired_lines(org, registry_url, token_env_var)
    if not path.exists():
        return merge(None, wanted)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as error:
        raise setup_common.SetupError(f"Failed to read {path}: {error}") from error
    return merge(parse(content, registry_url), wanted)


def write_npmrc(
    path: Path,
    org: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
    token_env_var: str = DEFAULT_TOKEN_ENV_VAR,
) -> MergeResult:
    """Apply the merge to ``path`` and return what was done."""
    if not os.access(path.parent, os.W_OK):
        raise setup_common.SetupError(
            f"Directory {path.parent} is not writable",
            hint=f"Check the permissions of {path.parent}",
        )

    result = plan_npmrc(path, org, registry_url, token_env_var)
    if result.action is MergeAction.UNCHANGED:
        return result

    try:
        path.write_text(result.content, encoding="utf-8")
    except OSError as error:
        raise setup_common.SetupError(f"Failed to write {path}: {error}") from error
    return result
