"""External program launching for open/edit/execute/shell actions.

Children inherit the environment plus ``PEEK_LEVEL`` (nesting depth, so a
spawned shell can tell it runs inside the browser) and ``PEEK_SELECTED``
(the selected entry name, for scripts). The caller is responsible for
handing the terminal back while the child runs.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import ChildLaunchFailure

LEVEL_ENV = "PEEK_LEVEL"
SELECTED_ENV = "PEEK_SELECTED"
DEFAULT_EDITOR = ("vi",)
DEFAULT_SHELL = ("/bin/sh",)


@dataclass(frozen=True)
class LaunchCommands:
    """Resolved argv prefixes for the launch actions."""

    editor: tuple[str, ...] = DEFAULT_EDITOR
    opener: tuple[str, ...] | None = None
    shell: tuple[str, ...] = DEFAULT_SHELL


def platform_opener(platform: str = sys.platform) -> tuple[str, ...] | None:
    """Return the desktop "open this file" program for ``platform``."""
    if platform == "cygwin":
        return ("cygstart",)
    if platform == "darwin":
        return ("open",)
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd")):
        return ("xdg-open",)
    return None


def _split_env_command(environ: Mapping[str, str], *names: str) -> tuple[str, ...] | None:
    for name in names:
        cmd = shlex.split(environ.get(name, "").strip())
        if cmd:
            return tuple(cmd)
    return None


def resolve_launch_commands(
    editor: tuple[str, ...] | None = None,
    opener: tuple[str, ...] | None = None,
    shell: tuple[str, ...] | None = None,
    environ: Mapping[str, str] | None = None,
) -> LaunchCommands:
    """Combine configured commands with environment and platform defaults.

    Configured values win, then ``$VISUAL``/``$EDITOR`` and ``$SHELL``, then
    built-in defaults.
    """
    env = os.environ if environ is None else environ
    return LaunchCommands(
        editor=editor or _split_env_command(env, "VISUAL", "EDITOR") or DEFAULT_EDITOR,
        opener=opener or platform_opener(),
        shell=shell or _split_env_command(env, "SHELL") or DEFAULT_SHELL,
    )


def child_environment(selected_name: str, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment overrides describing the browser to a child process."""
    env = os.environ if environ is None else environ
    try:
        level = int(env.get(LEVEL_ENV, "0")) + 1
    except ValueError:
        level = 1
    return {LEVEL_ENV: str(max(1, level)), SELECTED_ENV: selected_name}


def launch(
    program: Sequence[str],
    arg_path: Path | None = None,
    env_overrides: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    """Run ``program`` (plus ``arg_path``) to completion and return its exit status.

    Raises ``ChildLaunchFailure`` when the program cannot be started at all.
    """
    cmd = [*program]
    if arg_path is not None:
        cmd.append(str(arg_path))
    env = dict(os.environ)
    if env_overrides:
        env.update(env_overrides)
    try:
        completed = subprocess.run(cmd, cwd=cwd, env=env, check=False)
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise ChildLaunchFailure(f"could not launch {cmd[0]}: {reason}") from exc
    return completed.returncode
