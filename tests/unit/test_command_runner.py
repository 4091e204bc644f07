"""
Unit tests for CommandRunner against real POSIX tools.
"""
import shutil
import pytest
from lxctb.errors import CommandError, DependencyError
from lxctb.RUNNERS.command_runner import CommandRunner, format_argv

pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX shell")


@pytest.fixture
def runner():
    return CommandRunner()


def test_captures_stdout(runner):
    result = runner.run(["printf", "%s", "hello"])
    assert result.ok
    assert result.stdout == "hello"


def test_failure_raises_with_result(runner):
    with pytest.raises(CommandError) as exc:
        runner.run(["sh", "-c", "echo oops >&2; exit 3"])
    assert exc.value.result.returncode == 3
    assert "oops" in str(exc.value)


def test_tolerated_failure(runner):
    result = runner.run(["sh", "-c", "exit 4"], check=False)
    assert not result.ok
    assert result.returncode == 4


def test_missing_tool(runner):
    with pytest.raises(DependencyError, match="definitely-not-a-tool"):
        runner.run(["definitely-not-a-tool-lxctb"])


def test_env_is_added(runner):
    result = runner.run(["sh", "-c", 'printf "%s" "$KEY"'], env={"KEY": "ssh-ed25519 AAAA x"})
    assert result.stdout == "ssh-ed25519 AAAA x"


def test_pipe_to_file(runner, tmp_path):
    out = tmp_path / "out.txt"
    runner.pipe(["printf", "a\\nb\\n"], ["sort", "-r"], output_path=str(out))
    assert out.read_text() == "b\na\n"


def test_pipe_producer_failure(runner, tmp_path):
    with pytest.raises(CommandError) as exc:
        runner.pipe(["sh", "-c", "exit 2"], ["cat"], output_path=str(tmp_path / "out"))
    assert exc.value.result.argv == ["sh", "-c", "exit 2"]


def test_pipe_blames_failed_consumer(runner):
    with pytest.raises(CommandError) as exc:
        runner.pipe(["yes"], ["sh", "-c", "head -c 1 >/dev/null; exit 5"])
    assert exc.value.result.argv == ["sh", "-c", "head -c 1 >/dev/null; exit 5"]
    assert exc.value.result.returncode == 5
    assert "other side of the pipe exited" in str(exc.value)


def test_require(runner):
    assert runner.require("sh", "install a shell.")
    with pytest.raises(DependencyError, match="not found; install it."):
        runner.require("definitely-not-a-tool-lxctb", "install it.")


def test_format_argv():
    assert format_argv(["echo", "a b"]) == "echo 'a b'"
