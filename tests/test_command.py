"""Tests for command.py module.

Tests command rendering, masking and the process runner.
Uses mocked subprocess for execution tests.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vela_img.command import (
    IMG_BINARY,
    MASK,
    CommandInvocation,
    CommandResult,
    run_command,
    version_command,
)
from vela_img.errors import EXECUTION_ERROR, NONZERO_EXIT, ProcessError


class TestCommandInvocation:
    """Tests for CommandInvocation."""

    def test_argv(self):
        """Should prefix the arguments with the executable."""
        cmd = CommandInvocation(executable=Path("/usr/bin/img"), args=("version",))
        assert cmd.argv == ["/usr/bin/img", "version"]

    def test_render_masks_secrets(self):
        """Should replace secret values in the display string only."""
        cmd = CommandInvocation(
            executable=IMG_BINARY,
            args=("login", "-p=hunter2", "-u=me", "registry"),
            secret_args=(1,),
        )
        assert cmd.render() == f"/usr/bin/img login -p={MASK} -u=me registry"
        assert cmd.render(mask=False) == "/usr/bin/img login -p=hunter2 -u=me registry"
        assert "-p=hunter2" in cmd.argv

    def test_mask_limited_to_secret_argument(self):
        """A secret that also occurs in other arguments should only be hidden once."""
        cmd = CommandInvocation(
            executable=IMG_BINARY,
            args=("login", "-p=o", "-u=octocat", "index.docker.io"),
            secret_args=(1,),
        )
        assert cmd.render() == f"/usr/bin/img login -p={MASK} -u=octocat index.docker.io"

    def test_bare_secret_argument(self):
        """A secret argument without a flag prefix should be fully masked."""
        cmd = CommandInvocation(
            executable=IMG_BINARY, args=("login", "hunter2"), secret_args=(1,)
        )
        assert cmd.render() == f"/usr/bin/img login {MASK}"

    def test_password_containing_equals(self):
        """Only the flag name before the first = should be kept."""
        cmd = CommandInvocation(
            executable=IMG_BINARY, args=("-p=a=b",), secret_args=(0,)
        )
        assert cmd.render() == f"/usr/bin/img -p={MASK}"

    def test_no_secret_args(self):
        """Without secret arguments the line should be unchanged."""
        cmd = CommandInvocation(executable=IMG_BINARY, args=("version",))
        assert cmd.render() == "/usr/bin/img version"

    def test_repr_is_masked(self):
        """repr should not expose secrets."""
        cmd = CommandInvocation(
            executable=IMG_BINARY, args=("-p=hunter2",), secret_args=(0,)
        )
        assert "hunter2" not in repr(cmd)


class TestVersionCommand:
    """Tests for version_command function."""

    def test_default(self):
        """Should run `img version` with no other arguments."""
        cmd = version_command()
        assert cmd.argv == [str(IMG_BINARY), "version"]

    def test_custom_binary(self):
        """Should honour a custom executable path."""
        assert version_command(Path("/opt/img")).argv[0] == "/opt/img"


class TestRunCommand:
    """Tests for run_command function with mocked subprocess."""

    def test_success(self, capsys):
        """Should echo the command and return a result."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)

            result = run_command(version_command())

            assert isinstance(result, CommandResult)
            assert result.exit_code == 0
            assert result.finished_at >= result.started_at
            mock_run.assert_called_once_with(["/usr/bin/img", "version"], check=False)

        assert capsys.readouterr().out == "$ /usr/bin/img version\n"

    def test_output_not_captured(self):
        """Should let the child inherit stdout and stderr."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            run_command(version_command())

            kwargs = mock_run.call_args.kwargs
            assert "stdout" not in kwargs
            assert "stderr" not in kwargs
            assert "capture_output" not in kwargs

    def test_nonzero_exit(self):
        """Should raise ProcessError with the exit code."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2)

            with pytest.raises(ProcessError) as exc_info:
                run_command(version_command())

        assert exc_info.value.exit_code == 2
        assert exc_info.value.code == NONZERO_EXIT

    def test_launch_failure(self):
        """Should wrap OSError when the binary cannot start."""
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("no such file")

            with pytest.raises(ProcessError) as exc_info:
                run_command(version_command())

        assert exc_info.value.exit_code is None
        assert exc_info.value.code == EXECUTION_ERROR
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_echo_is_masked(self, capsys):
        """The echoed line should not contain secrets."""
        cmd = CommandInvocation(
            executable=IMG_BINARY, args=("login", "-p=hunter2"), secret_args=(1,)
        )
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            run_command(cmd)

        assert "hunter2" not in capsys.readouterr().out
