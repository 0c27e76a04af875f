#!/usr/bin/env python3
"""Interactive terminal input: masked secret entry and yes/no confirmation."""

from __future__ import annotations

import getpass

import setup_common


class TerminalPrompter:
    """Reads from the controlling terminal; tests swap in a scripted fake."""

    def read_secret(self, prompt: str) -> str:
        print("\033[33m⚠️  Input is hidden. Never share your GitHub token.\033[0m")
        try:
            return getpass.getpass(f"\033[32m🔒 {prompt}\033[0m")
        except EOFError as error:
            raise setup_common.SetupError("Token input was interrupted") from error

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; anything but y/yes (including EOF) is no."""
        try:
            answer = input(f"{question} (y/N): ")
        except EOFError:
            print()
            return False
        return answer.strip().lower() in {"y", "yes"}
