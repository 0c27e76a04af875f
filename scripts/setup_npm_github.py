#!/usr/bin/env python3
# file: scripts/setup_npm_github.py
# version: 1.0.0
# guid: a8c3f5e1-7b24-4d90-8e6f-1c5b9a0d3e72

"""Configure npm on macOS to install from GitHub Packages.

Stores a GitHub token in the login Keychain, makes the shell load it into
``NPM_TOKEN`` at startup, points the organization scope at the GitHub
Packages registry in ``~/.npmrc`` and finally checks the login with
``npm whoami``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import getpass
import os
from pathlib import Path
import signal
import sys
from typing import Any, Mapping, Sequence

import keychain
import npmrc
import prompts
import setup_common
import shell_profile

DEFAULT_ORG = "yolotechnology"
DRY_RUN_TOKEN = "DRY_RUN_TOKEN"

USAGE = """Usage: setup-npm-github [--org ORG] [--dry-run] [--token TOKEN] [--config PATH]

Options:
  --org ORG       npm scope / GitHub organization (default: {org})
  --token TOKEN   use TOKEN instead of prompting (visible in shell history)
  --dry-run       print what would change without touching anything
  --config PATH   YAML settings file (default: ${env} or {path})
  -h, --help      show this message and exit
"""


@dataclass
class SetupContext:
    """Everything the setup stages need, resolved once at startup."""

    org: str
    dry_run: bool
    token_arg: str | None
    home: Path
    account: str
    environ: Mapping[str, str]
    keychain_service: str = keychain.DEFAULT_SERVICE
    registry_url: str = npmrc.DEFAULT_REGISTRY_URL
    token_env_var: str = npmrc.DEFAULT_TOKEN_ENV_VAR
    runner: setup_common.CommandRunner = field(
        default_factory=setup_common.CommandRunner
    )
    prompter: Any = field(default_factory=prompts.TerminalPrompter)
    profile_path: Path | None = None

    @property
    def npmrc_path(self) -> Path:
        return self.home / ".npmrc"


def parse_flags(argv: Sequence[str]) -> dict[str, str | bool]:
    """Permissive ``--key=value`` / ``--key value`` / ``--flag`` parser.

    A following token is taken as the value unless it looks like a flag.
    Stray positional tokens are ignored and unknown flags never raise.
    """
    flags: dict[str, str | bool] = {}
    index = 0
    while index < len(argv):
        arg = argv[index]
        index += 1
        if arg == "-h":
            flags["h"] = True
            continue
        if not arg.startswith("--"):
            continue

        key, sep, value = arg[2:].partition("=")
        if sep:
            flags[key] = value
        elif index < len(argv) and not argv[index].startswith("-"):
            flags[key] = argv[index]
            index += 1
        else:
            flags[key] = True
    return flags


def _flag_text(flags: Mapping[str, str | bool], name: str) -> str:
    value = flags.get(name)
    return value if isinstance(value, str) else ""


def usage() -> str:
    return USAGE.format(
        org=DEFAULT_ORG,
        env=setup_common.CONFIG_ENV_VAR,
        path=setup_common.DEFAULT_CONFIG_PATH,
    )


def build_context(
    flags: Mapping[str, str | bool],
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
    runner: setup_common.CommandRunner | None = None,
    prompter: Any = None,
) -> SetupContext:
    """Merge CLI flags, the settings file and built-in defaults."""
    env = dict(os.environ) if environ is None else environ
    home = home if home is not None else Path.home()
    config_file = setup_common.resolve_config_file(
        _flag_text(flags, "config") or None, env, home
    )
    config = setup_common.load_setup_config(config_file)

    return SetupContext(
        org=_flag_text(flags, "org")
        or str(setup_common.config_value(config, DEFAULT_ORG, "org")),
        dry_run=bool(flags.get("dry-run")),
        token_arg=_flag_text(flags, "token") if "token" in flags else None,
        home=home,
        account=env.get("USER") or getpass.getuser(),
        environ=env,
        keychain_service=str(
            setup_common.config_value(config, keychain.DEFAULT_SERVICE, "keychain_service")
        ),
        registry_url=str(
            setup_common.config_value(config, npmrc.DEFAULT_REGISTRY_URL, "registry_url")
        ).rstrip("/"),
        token_env_var=str(
            setup_common.config_value(config, npmrc.DEFAULT_TOKEN_ENV_VAR, "token_env_var")
        ),
        runner=runner or setup_common.CommandRunner(),
        prompter=prompter or prompts.TerminalPrompter(),
    )


def acquire_token(ctx: SetupContext) -> str:
    """Token from --token, the dry-run placeholder, or a hidden prompt."""
    if ctx.token_arg is not None:
        print("⚠️  --token is recorded in your shell history; prefer the prompt")
        token = ctx.token_arg.strip()
    elif ctx.dry_run:
        token = DRY_RUN_TOKEN
        print("ℹ️ dry-run: using a placeholder token, nothing is written to Keychain")
    else:
        token = ctx.prompter.read_secret("Enter GitHub token and press Enter: ").strip()

    if not token:
        raise setup_common.SetupError(
            "GitHub token must not be empty",
            hint="Create a token with read:packages scope at "
            "https://github.com/settings/tokens",
        )
    return token


def confirm_changes(ctx: SetupContext) -> bool:
    return ctx.prompter.confirm(
        "About to write the macOS Keychain and modify your shell rc file "
        "and ~/.npmrc. Continue?"
    )


def save_token(ctx: SetupContext, token: str) -> None:
    if ctx.dry_run:
        print(
            "ℹ️ dry-run: would save token to macOS Keychain "
            f"(service: {ctx.keychain_service})"
        )
        return
    keychain.store_token(ctx.runner, ctx.account, ctx.keychain_service, token)
    print("✅ Token saved to Keychain")


def setup_shell_profile(ctx: SetupContext) -> shell_profile.ProfileUpdate:
    ctx.profile_path = shell_profile.detect_profile(ctx.environ, ctx.home)
    return shell_profile.update_profile(
        ctx.profile_path,
        ctx.keychain_service,
        env_var=ctx.token_env_var,
        dry_run=ctx.dry_run,
    )


def setup_npmrc(ctx: SetupContext) -> npmrc.MergeResult:
    path = ctx.npmrc_path
    if ctx.dry_run:
        result = npmrc.plan_npmrc(path, ctx.org, ctx.registry_url, ctx.token_env_var)
        wanted = npmrc.desired_lines(ctx.org, ctx.registry_url, ctx.token_env_var)
        if result.action is npmrc.MergeAction.UNCHANGED:
            print(f"ℹ️ dry-run: {path} already has the right configuration")
        else:
            verb = "create" if result.action is npmrc.MergeAction.CREATE else "update"
            print(f"ℹ️ dry-run: would {verb} {path} with:")
        print("---")
        print(npmrc.render(wanted))
        print("---")
        return result

    result = npmrc.write_npmrc(path, ctx.org, ctx.registry_url, ctx.token_env_var)
    if result.action is npmrc.MergeAction.CREATE:
        print(f"✅ Created {path}")
    elif result.action is npmrc.MergeAction.UPDATE:
        print(f"✅ Updated {path}")
    else:
        print(f"ℹ️ {path} already has the right configuration, skipping")
    return result


def report_env_token(ctx: SetupContext) -> None:
    print(f"🔍 Checking {ctx.token_env_var}:")
    value = ctx.environ.get(ctx.token_env_var, "")
    if value:
        print(f"🔍 {ctx.token_env_var} is loaded (length: {len(value)})")
    else:
        print(f"⚠️  {ctx.token_env_var} is not loaded in this shell yet")


def _reload_hint(ctx: SetupContext) -> str:
    profile = ctx.profile_path or ctx.home / ".zshrc"
    return f"source {profile}"


def verify_registry_login(ctx: SetupContext) -> str | None:
    """Run ``npm whoami`` with the stored token; return the user name."""
    command = ["npm", "whoami", f"--registry={ctx.registry_url}"]
    if ctx.dry_run:
        print(
            f"ℹ️ dry-run: would run `{' '.join(command)}` to verify the login "
            "(not executed)"
        )
        print(
            "\n⚠️  dry-run mode: rerun without --dry-run to apply the changes, "
            f"then run `{_reload_hint(ctx)}` or open a new terminal."
        )
        return None

    token = keychain.read_token(ctx.runner, ctx.account, ctx.keychain_service)
    if not token:
        token = ctx.environ.get(ctx.token_env_var, "")
    if not token:
        raise setup_common.SetupError(
            f"Could not read {ctx.token_env_var} from Keychain or the environment",
            hint=f"Save it to Keychain (service {ctx.keychain_service}) "
            f"or export {ctx.token_env_var}",
        )

    child_env = dict(ctx.environ)
    child_env[ctx.token_env_var] = token
    with setup_common.timed_operation("npm whoami"):
        result = ctx.runner.run(command, env=child_env)

    user = result.stdout.strip()
    if result.ok and user:
        print(f"✅ npm login verified, user: {user}")
        print(
            "\n⚠️  In a non-interactive terminal you may need to run "
            f"`{_reload_hint(ctx)}`\n   or restart the terminal to use "
            f"{ctx.token_env_var} in your shell"
        )
        return user

    raise setup_common.VerificationError(
        "Login check failed, make sure the token is correct",
        output=result.output,
    )


def run_setup(ctx: SetupContext) -> int:
    token = acquire_token(ctx)

    if not ctx.dry_run and not confirm_changes(ctx):
        print("Cancelled")
        return 0

    save_token(ctx, token)
    setup_shell_profile(ctx)
    setup_npmrc(ctx)
    report_env_token(ctx)
    verify_registry_login(ctx)
    return 0


def _raise_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def install_signal_handlers() -> Any:
    """Route SIGTERM through the same path as Ctrl-C; return the old handler."""
    return signal.signal(signal.SIGTERM, _raise_interrupt)


def report_verification_failure(error: setup_common.VerificationError) -> None:
    print(setup_common.sanitize_log(str(error)), file=sys.stderr)
    if error.output.strip():
        print("\n--- npm output ---", file=sys.stderr)
        print(setup_common.sanitize_log(error.output.rstrip("\n")), file=sys.stderr)
        print("--- end output ---\n", file=sys.stderr)


def main(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
    runner: setup_common.CommandRunner | None = None,
    prompter: Any = None,
    system: str | None = None,
) -> int:
    """Entry point for CLI usage."""
    flags = parse_flags(sys.argv[1:] if argv is None else argv)
    if "help" in flags or "h" in flags:
        print(usage())
        return 0

    previous_handler = install_signal_handlers()
    try:
        keychain.require_macos(system)
        ctx = build_context(flags, environ, home, runner, prompter)
        return run_setup(ctx)
    except setup_common.VerificationError as error:
        report_verification_failure(error)
        return 1
    except KeyboardInterrupt:
        print("\n❌ Setup interrupted", file=sys.stderr)
        return 1
    except Exception as error:  # pylint: disable=broad-except
        setup_common.handle_error(error, "npm registry setup")
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
