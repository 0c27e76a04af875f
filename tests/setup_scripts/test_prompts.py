#!/usr/bin/env python3
# file: tests/setup_scripts/test_prompts.py
# version: 1.0.0
# guid: 6c2e8b4f-a913-4d57-8f0a-b1d7e5c3a928

"""Unit tests for the terminal prompter."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "scripts"))

import prompts  # pylint: disable=wrong-import-position
import setup_common  # pylint: disable=wrong-import-position


def answer_with(monkeypatch: pytest.MonkeyPatch, reply) -> list[str]:
    """Make input() return ``reply`` (or raise it) and record the prompts."""
    asked: list[str] = []

    def fake_input(prompt: str = "") -> str:
        asked.append(prompt)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    monkeypatch.setattr("builtins.input", fake_input)
    return asked


@pytest.mark.parametrize("reply", ["y", "Y", "yes", " yes ", "YES"])
def test_confirm_accepts_yes(monkeypatch: pytest.MonkeyPatch, reply: str) -> None:
    asked = answer_with(monkeypatch, reply)

    assert prompts.TerminalPrompter().confirm("Continue?") is True
    assert asked == ["Continue? (y/N): "]


@pytest.mark.parametrize("reply", ["", "n", "no", "yep", "sure"])
def test_confirm_defaults_to_no(monkeypatch: pytest.MonkeyPatch, reply: str) -> None:
    answer_with(monkeypatch, reply)

    assert prompts.TerminalPrompter().confirm("Continue?") is False


def test_confirm_treats_eof_as_no(monkeypatch: pytest.MonkeyPatch) -> None:
    answer_with(monkeypatch, EOFError())

    assert prompts.TerminalPrompter().confirm("Continue?") is False


def test_read_secret_uses_getpass(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    asked: list[str] = []

    def fake_getpass(prompt: str = "") -> str:
        asked.append(prompt)
        return "ghp_typed"

    monkeypatch.setattr(prompts.getpass, "getpass", fake_getpass)

    assert prompts.TerminalPrompter().read_secret("Token: ") == "ghp_typed"
    assert "Token: " in asked[0]
    assert "Input is hidden" in capsys.readouterr().out


def test_read_secret_eof_is_setup_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_getpass(prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr(prompts.getpass, "getpass", fake_getpass)

    with pytest.raises(setup_common.SetupError) as exc_info:
        prompts.TerminalPrompter().read_secret("Token: ")

    assert "interrupted" in str(exc_info.value)


def test_read_secret_ctrl_c_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_getpass(prompt: str = "") -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr(prompts.getpass, "getpass", fake_getpass)

    with pytest.raises(KeyboardInterrupt):
        prompts.TerminalPrompter().read_secret("Token: ")
