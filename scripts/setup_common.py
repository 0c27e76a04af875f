#!/usr/bin/env python3
# file: scripts/setup_common.py
# version: 1.0.0
# guid: 3b9e7c2a-51d4-4f08-a6e2-8c1d0f7b4a95

"""Shared utilities for the npm registry setup scripts."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import os
from pathlib import Path
import re
import subprocess
import sys
import time
from typing import Any, Mapping, Sequence

import yaml

CONFIG_ENV_VAR = "SETUP_NPM_GITHUB_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/setup-npm-github/config.yml")

_CONFIG_CACHE: dict[str, dict[str, Any]] = {}


class SetupError(Exception):
    """Setup failure with optional hints and documentation links."""

    def __init__(
        self,
        message: str,
        hint: str = "",
        docs_url: str = "",
    ) -> None:
        """Initialize setup error."""
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.docs_url = docs_url

    def __str__(self) -> str:
        """Format error with hints and documentation links."""
        parts = [f"❌ {self.message}"]
        if self.hint:
            parts.append(f"💡 Hint: {self.hint}")
        if self.docs_url:
            parts.append(f"📚 Docs: {self.docs_url}")
        return "\n".join(parts)


class VerificationError(SetupError):
    """Registry login check failed; keeps the command output for the report."""

    def __init__(self, message: str, output: str = "", hint: str = "") -> None:
        super().__init__(message, hint=hint)
        self.output = output


@dataclass
class CommandResult:
    """Exit status and captured streams of an external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, in that order."""
        return f"{self.stdout}{self.stderr}"


class CommandRunner:
    """Run an executable synchronously and capture its output."""

    def run(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        try:
            result = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                check=False,
                env=dict(env) if env is not None else None,
            )
        except OSError as error:
            # Missing binary behaves like a shell's "command not found".
            return CommandResult(returncode=127, stderr=f"{args[0]}: {error}\n")
        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )


def resolve_config_file(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the settings file path: explicit flag, then env var, then default."""
    env = os.environ if environ is None else environ
    raw = explicit or env.get(CONFIG_ENV_VAR)
    if raw:
        return Path(raw).expanduser()
    base = home if home is not None else Path.home()
    return base / DEFAULT_CONFIG_PATH.relative_to("~")


def load_setup_config(path: Path) -> dict[str, Any]:
    """Load and cache the YAML settings file; a missing file means defaults."""
    key = str(path)
    if key in _CONFIG_CACHE:
        return _CONFIG_CACHE[key]

    if not path.exists():
        _CONFIG_CACHE[key] = {}
        return _CONFIG_CACHE[key]

    try:
        with path.open(encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
    except yaml.YAMLError as error:
        raise SetupError(
            f"Invalid YAML in {path}: {error}",
            hint=f"Validate with: yamllint {path}",
        ) from error
    except OSError as error:
        raise SetupError(f"Cannot read {path}: {error}") from error

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise SetupError(
            f"{path} must contain a YAML dictionary",
            hint="Use top-level keys such as org, registry_url, keychain_service",
        )

    _CONFIG_CACHE[key] = loaded
    return loaded


def config_value(config: Mapping[str, Any], default: Any, *path: str) -> Any:
    """Navigate configuration dictionary and return value or default."""
    current: Any = config
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    if current is None or current == "":
        return default
    return current


@contextmanager
def timed_operation(operation_name: str):
    """Context manager that prints the duration of an operation."""
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        print(f"⏱️  {operation_name} took {duration:.2f}s")


def handle_error(error: Exception, context: str) -> None:
    """Print error details to stderr and exit with status 1."""
    if isinstance(error, SetupError):
        message = str(error)
    else:
        message = f"❌ Unexpected error in {context}: {error}"
    print(sanitize_log(message), file=sys.stderr)
    sys.exit(1)


def sanitize_log(message: str) -> str:
    """Mask sensitive tokens from log messages."""
    sanitized = re.sub(r"gh[pousr]_[a-zA-Z0-9]{36}", "***GITHUB_TOKEN***", message)
    sanitized = re.sub(
        r"github_pat_[a-zA-Z0-9_]{22,}",
        "***GITHUB_TOKEN***",
        sanitized,
    )
    sanitized = re.sub(
        r"Bearer\s+[a-zA-Z0-9\-._~+/]+=*",
        "Bearer ***TOKEN***",
        sanitized,
    )
    sanitized = re.sub(
        r"(_authToken=)(?!\$\{)(\S+)",
        r"\1***TOKEN***",
        sanitized,
    )
    return sanitized


def ensure_file(path: Path, content: str = "") -> bool:
    """Create file with content if it does not already exist."""
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True
