#!/usr/bin/env python3
# file: tests/conftest.py
# version: 1.0.0
# guid: 71d8c4e2-3f9a-4b06-a5d7-e0b1c6f8a392

"""Shared fixtures: scripted terminal input and a fake `security`/`npm`."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

import setup_common  # pylint: disable=wrong-import-position


class ScriptedPrompter:
    """Feeds canned answers instead of reading the terminal."""

    def __init__(self, secret: str = "", confirm: bool = True) -> None:
        self.secret = secret
        self.answer = confirm
        self.secret_prompts: list[str] = []
        self.questions: list[str] = []

    def read_secret(self, prompt: str) -> str:
        self.secret_prompts.append(prompt)
        return self.secret

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer


class FakeRunner(setup_common.CommandRunner):
    """Keeps Keychain entries in a dict and answers `npm whoami` from fields."""

    def __init__(
        self,
        whoami: setup_common.CommandResult | None = None,
        fail_store: bool = False,
    ) -> None:
        self.keychain: dict[tuple[str, str], str] = {}
        self.calls: list[list[str]] = []
        self.envs: list[dict[str, str] | None] = []
        self.whoami = whoami or setup_common.CommandResult(0, stdout="octocat\n")
        self.fail_store = fail_store

    def run(self, args, env=None):
        args = list(args)
        self.calls.append(args)
        self.envs.append(dict(env) if env is not None else None)

        if args[:2] == ["security", "add-generic-password"]:
            if self.fail_store:
                return setup_common.CommandResult(
                    1, stderr="security: SecKeychainItemCreateFromContent: denied\n"
                )
            account = args[args.index("-a") + 1]
            service = args[args.index("-s") + 1]
            self.keychain[(account, service)] = args[args.index("-w") + 1]
            return setup_common.CommandResult(0)

        if args[:2] == ["security", "find-generic-password"]:
            account = args[args.index("-a") + 1]
            service = args[args.index("-s") + 1]
            if (account, service) not in self.keychain:
                return setup_common.CommandResult(
                    44, stderr="security: The specified item could not be found\n"
                )
            return setup_common.CommandResult(
                0, stdout=self.keychain[(account, service)] + "\n"
            )

        if args[:2] == ["npm", "whoami"]:
            return self.whoami

        return setup_common.CommandResult(127, stderr=f"{args[0]}: not found\n")

    def commands(self, *prefix: str) -> list[list[str]]:
        return [call for call in self.calls if call[: len(prefix)] == list(prefix)]


@pytest.fixture(autouse=True)
def reset_config_cache() -> Generator[None, None, None]:
    """Reset cached settings between tests."""
    setup_common._CONFIG_CACHE.clear()  # type: ignore[attr-defined]
    yield
    setup_common._CONFIG_CACHE.clear()  # type: ignore[attr-defined]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def environ(home: Path) -> dict[str, str]:
    return {"HOME": str(home), "USER": "dev", "SHELL": "/bin/zsh", "PATH": "/usr/bin"}


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter(secret="ghp_interactive")
