import shlex
import signal
import subprocess

import pytest

from fzterm.executor import Executor, ShellType, escape_arg, kill_command

SAMPLES = ["plain", "it's", "a b", "back\\slash", "$HOME `x` \"q\"", ""]


def test_default_shell_is_sh(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    executor = Executor("", windows=False)
    assert executor.command("ls") == ["sh", "-c", "ls"]


def test_shell_from_environment(monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/bash")
    executor = Executor("", windows=False)
    assert executor.command("ls") == ["/bin/bash", "-c", "ls"]


def test_with_shell_overrides(monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/zsh")
    executor = Executor("bash -eu -c", windows=False)
    assert executor.command("ls") == ["bash", "-eu", "-c", "ls"]


@pytest.mark.parametrize("entry", SAMPLES)
def test_posix_quote_round_trip(entry):
    executor = Executor("sh -c", windows=False)
    assert shlex.split(executor.quote_entry(entry)) == [entry]


@pytest.mark.parametrize("entry", SAMPLES)
def test_quote_through_real_shell(entry):
    executor = Executor("sh -c", windows=False)
    process = executor.exec_command(
        "printf %s " + executor.quote_entry(entry), False, stdout=subprocess.PIPE
    )
    out, _ = process.communicate(timeout=10)
    assert out.decode() == entry


def test_fish_quote():
    executor = Executor("/usr/bin/fish -c", windows=False)
    assert executor.quote_entry("a\\b'c") == "'a\\\\b\\'c'"


def test_exec_command_output():
    executor = Executor("sh -c", windows=False)
    process = executor.exec_command("echo hello", False, stdout=subprocess.PIPE)
    out, _ = process.communicate(timeout=10)
    assert out == b"hello\n"


def test_kill_command_kills_group():
    executor = Executor("sh -c", windows=False)
    process = executor.exec_command("sleep 30", True)
    kill_command(process)
    assert process.wait(timeout=10) == -signal.SIGKILL


def test_become_missing_shell_exits_127():
    executor = Executor("no-such-shell-for-fzterm -c", windows=False)
    with pytest.raises(SystemExit) as info:
        executor.become(None, {}, "true")
    assert info.value.code == 127


def test_windows_cmd_default(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    executor = Executor("", windows=True)
    assert executor.shell_type is ShellType.CMD
    assert executor.command("dir") == ["cmd", "/s/c", "dir"]
    assert executor.quote_entry("x&y") == escape_arg("x&y")


def test_windows_powershell(monkeypatch):
    monkeypatch.setenv("SHELL", "C:\\Program Files\\PowerShell\\pwsh.exe")
    executor = Executor("", windows=True)
    assert executor.shell_type is ShellType.POWERSHELL
    assert executor.args == ["-NoProfile", "-Command"]
    assert executor.quote_entry("it's") == "'it''s'"


def test_windows_explicit_shell_is_unknown(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    executor = Executor("bash -c", windows=True)
    assert executor.shell_type is ShellType.UNKNOWN
    assert executor.command("ls") == ["bash", "-c", "ls"]
    assert shlex.split(executor.quote_entry("it's")) == ["it's"]


def test_escape_arg_quote():
    assert escape_arg('a"b') == '^"a\\^"b^"'


@pytest.mark.parametrize("text", ["abc", "hello world", "x.y-z"])
def test_escape_arg_plain_text_is_wrapped(text):
    assert escape_arg(text) == '^"' + text + '^"'


@pytest.mark.parametrize("char", list("&|<>()^%!"))
def test_escape_arg_escapes_metacharacters(char):
    result = escape_arg("a" + char + "b")
    assert "^" + char in result
    assert result.startswith('^"') and result.endswith('^"')


def test_escape_arg_doubles_trailing_backslashes():
    result = escape_arg("dir\\")
    assert result.endswith('\\\\^"')