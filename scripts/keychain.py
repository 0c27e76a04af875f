#!/usr/bin/env python3
"""Read and write the registry token in the macOS Keychain via `security`."""

from __future__ import annotations

import platform

import setup_common

DEFAULT_SERVICE = "GITHUB_PACKAGES_NPM_TOKEN"


def require_macos(system: str | None = None) -> None:
    """Raise unless running on macOS, where the `security` tool exists."""
    current = system if system is not None else platform.system()
    if current != "Darwin":
        raise setup_common.SetupError(
            f"This script only supports macOS (detected {current or 'unknown'})",
            hint="Configure ~/.npmrc and NPM_TOKEN manually on other systems",
        )


def store_token(
    runner: setup_common.CommandRunner,
    account: str,
    service: str,
    token: str,
) -> None:
    """Create or overwrite the generic password entry (``-U`` upserts)."""
    result = runner.run(
        [
            "security",
            "add-generic-password",
            "-a",
            account,
            "-s",
            service,
            "-w",
            token,
            "-U",
        ]
    )
    if not result.ok:
        detail = result.output.strip() or f"exit status {result.returncode}"
        raise setup_common.SetupError(
            f"Failed to save token to Keychain: {detail}",
            hint="Unlock the login keychain and check its access permissions",
        )


def read_token(
    runner: setup_common.CommandRunner,
    account: str,
    service: str,
) -> str:
    """Return the stored token, or an empty string when it cannot be read."""
    result = runner.run(
        ["security", "find-generic-password", "-a", account, "-s", service, "-w"]
    )
    if not result.ok:
        return ""
    return result.stdout.strip()
