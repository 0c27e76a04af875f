#!/usr/bin/env python3
# file: scripts/shell_profile.py
# version: 1.0.0
# guid: 5f0c8a3d-2e71-4b96-9d1a-b7e4c6f23a10

"""Locate the user's shell startup file and add the Keychain token loader."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import setup_common

LOADER_COMMENT = "# Load GitHub Packages token from macOS Keychain"
LOADER_COMMAND = "security find-generic-password"


@dataclass(frozen=True)
class ProfileUpdate:
    """What ``update_profile`` did (or, in dry-run, would do)."""

    path: Path
    created: bool
    appended: bool


def loader_snippet(service: str, env_var: str = "NPM_TOKEN") -> str:
    """Comment plus export line that reads the token from the Keychain at shell start."""
    return (
        f"{LOADER_COMMENT}\n"
        f'export {env_var}="$({LOADER_COMMAND} -a "$USER" -s {service} -w 2>/dev/null)"'
    )


def has_loader(content: str, service: str) -> bool:
    return service in content and LOADER_COMMAND in content


def detect_profile(environ: Mapping[str, str], home: Path) -> Path:
    """Map the login shell from ``$SHELL`` to its startup file."""
    shell = Path(environ.get("SHELL", "")).name
    if shell == "zsh":
        return home / ".zshrc"
    if shell == "bash":
        bashrc = home / ".bashrc"
        return bashrc if bashrc.exists() else home / ".bash_profile"

    raise setup_common.SetupError(
        f"Unsupported shell: {shell or '(unset)'}",
        hint="Run from zsh or bash, or set SHELL=/bin/zsh",
    )


def update_profile(
    path: Path,
    service: str,
    env_var: str = "NPM_TOKEN",
    dry_run: bool = False,
) -> ProfileUpdate:
    """Create ``path`` if needed and append the loader once."""
    created = False
    if not path.exists():
        if dry_run:
            print(f"ℹ️ dry-run: would create {path}")
        else:
            try:
                setup_common.ensure_file(path)
            except OSError as error:
                raise setup_common.SetupError(
                    f"Cannot create {path}: {error}"
                ) from error
            print(f"ℹ️ {path} not found, created it")
        created = True

    try:
        content = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as error:
        raise setup_common.SetupError(f"Failed to read {path}: {error}") from error

    if has_loader(content, service):
        print(f"ℹ️ {path} already loads {env_var}, skipping")
        return ProfileUpdate(path=path, created=created, appended=False)

    block = f"\n{loader_snippet(service, env_var)}\n"
    if dry_run:
        print(f"ℹ️ dry-run: would append {env_var} loader to {path}:")
        print(block)
        return ProfileUpdate(path=path, created=created, appended=True)

    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(block)
    except OSError as error:
        raise setup_common.SetupError(f"Failed to write {path}: {error}") from error
    print(f"✅ Added {env_var} loader to {path}")
    return ProfileUpdate(path=path, created=created, appended=True)
