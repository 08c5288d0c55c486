"""Run commands through the user's shell and quote entries for it."""

from __future__ import annotations

import enum
import ntpath
import os
import re
import shutil
import signal
import subprocess
import sys
from typing import Iterable, Mapping

_CMD_SPECIAL = re.compile(r'[&|<>()^%!"]')


class ShellType(enum.Enum):
    """Kind of shell, which decides how entries are quoted."""

    UNKNOWN = 0
    CMD = 1
    POWERSHELL = 2


def escape_arg(text: str) -> str:
    """Quote an argument for cmd.exe, escaping its metacharacters with carets."""
    out = ['"']
    slashes = 0
    for char in text:
        if char == "\\":
            slashes += 1
        elif char == '"':
            out.append("\\" * slashes + "\\")
            slashes = 0
        else:
            slashes = 0
        out.append(char)
    out.append("\\" * slashes)
    out.append('"')
    return _CMD_SPECIAL.sub(lambda m: "^" + m.group(0), "".join(out))


def _environ_dict(environ: Mapping[str, str] | Iterable[str] | None) -> dict[str, str]:
    if environ is None:
        return dict(os.environ)
    if isinstance(environ, Mapping):
        return dict(environ)
    result: dict[str, str] = {}
    for entry in environ:
        name, _, value = entry.partition("=")
        result[name] = value
    return result


class Executor:
    """Starts commands with a shell, either $SHELL or the one given explicitly."""

    def __init__(self, with_shell: str = "", windows: bool | None = None) -> None:
        self.windows = os.name == "nt" if windows is None else windows
        self.shell_type = ShellType.UNKNOWN
        shell = os.environ.get("SHELL", "")
        args = with_shell.split()
        if self.windows:
            if args:
                shell = args[0]
            elif not shell:
                shell = "cmd"
            basename = ntpath.basename(shell)
            if args:
                args = args[1:]
            elif basename.startswith("cmd"):
                self.shell_type = ShellType.CMD
                args = ["/s/c"]
            elif basename.startswith(("pwsh", "powershell")):
                self.shell_type = ShellType.POWERSHELL
                args = ["-NoProfile", "-Command"]
            else:
                args = ["-c"]
            self._fish = False
        else:
            if args:
                shell, args = args[0], args[1:]
            else:
                shell = shell or "sh"
                args = ["-c"]
            self._fish = shell.split("/")[-1] == "fish"
        self.shell = shell
        self.args = args
        self._resolved_shell: str | None = None

    def _shell_path(self) -> str:
        if not self.windows:
            return self.shell
        if self._resolved_shell is None:
            shell = self.shell
            if "/" in shell:
                try:
                    out = subprocess.run(
                        ["cygpath", "-w", shell], capture_output=True, check=True, text=True
                    ).stdout
                    shell = out.strip("\n")
                except (OSError, subprocess.CalledProcessError):
                    pass
            self._resolved_shell = shell
        return self._resolved_shell

    def command(self, command: str) -> list[str]:
        """Return the argument vector that runs command with the shell."""
        return [self._shell_path(), *self.args, command]

    def exec_command(self, command: str, setpgid: bool = False, **kwargs) -> subprocess.Popen:
        """Start command with the shell; extra keyword arguments go to subprocess.Popen."""
        if self.windows and self.shell_type is ShellType.CMD:
            cmdline = f'{" ".join(self.args)} "{command}"'
            return subprocess.Popen(cmdline, executable=self._shell_path(), **kwargs)
        if setpgid and not self.windows:
            kwargs.setdefault("start_new_session", True)
        return subprocess.Popen(self.command(command), **kwargs)

    def quote_entry(self, entry: str) -> str:
        """Quote entry so the shell reads it back as one literal word."""
        if self.shell_type is ShellType.CMD:
            return escape_arg(entry)
        if self.shell_type is ShellType.POWERSHELL:
            escaped = entry.replace('"', '\\"')
            return "'" + escaped.replace("'", "''") + "'"
        if self._fish:
            return "'" + entry.replace("\\", "\\\\").replace("'", "\\'") + "'"
        return "'" + entry.replace("'", "'\\''") + "'"

    def become(self, stdin, environ, command: str) -> None:
        """Replace the current process with command run by the shell; never returns."""
        env = _environ_dict(environ)
        if self.windows:
            try:
                process = self.exec_command(command, False, stdin=stdin, env=env)
            except OSError as exc:
                print(f"fzterm (become): {exc}", file=sys.stderr)
                raise SystemExit(127) from exc
            raise SystemExit(process.wait())

        shell_path = shutil.which(self.shell)
        if shell_path is None:
            print(
                f'fzterm (become): exec: "{self.shell}": executable file not found in $PATH',
                file=sys.stderr,
            )
            raise SystemExit(127)
        if stdin is not None:
            os.dup2(stdin.fileno(), 0)
        os.execve(shell_path, [shell_path, *self.args, command], env)


def kill_command(process: subprocess.Popen) -> None:
    """Kill the process; on POSIX its whole process group."""
    if os.name == "nt":
        process.kill()
    else:
        os.killpg(process.pid, signal.SIGKILL)