"""
Tests for the command runner
"""

import logging
import pytest
from unittest.mock import Mock, patch

from oobsetup.backend.shell import ShellResult, mask_secrets, run
from oobsetup.errors import ShellExecutionError


def test_run_success():
    """Test stdout/stderr/exit status are captured"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout=" 01 02\n", stderr="", returncode=0)
        result = run(["ipmitool", "raw", "0x30", "0x6a"])

    assert result == ShellResult(stdout=" 01 02\n", stderr="", exit_status=0)
    assert not result.failed
    mock_run.assert_called_once_with(
        ["ipmitool", "raw", "0x30", "0x6a"], capture_output=True, text=True, check=False
    )


def test_run_failure_raises():
    """Test a non-zero exit raises with the captured output"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout="partial", stderr="Error in open session", returncode=1)
        with pytest.raises(ShellExecutionError, match="exited with status 1") as exc:
            run(["ipmitool", "user", "list"])

    assert exc.value.exit_status == 1
    assert exc.value.stdout == "partial"
    assert exc.value.stderr == "Error in open session"
    assert exc.value.argv == ["ipmitool", "user", "list"]


def test_run_failure_tolerated():
    """Test force_fail=False hands back the failed result"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout="", stderr="Failure: password incorrect", returncode=1)
        result = run(["ipmitool", "user", "test", "2", "20", "nope"], force_fail=False)

    assert result.failed
    assert result.exit_status == 1


def test_missing_executable():
    """Test a missing tool is reported as exit status 127"""
    with patch("subprocess.run", side_effect=FileNotFoundError("No such file: 'racadm'")):
        with pytest.raises(ShellExecutionError) as exc:
            run(["racadm", "get", "iDRAC.NIC"])
    assert exc.value.exit_status == 127


def test_arguments_stringified():
    """Test non-string arguments are converted before execution"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout="", stderr="", returncode=0)
        run(["ipmitool", "lan", "print", 1])
    assert mock_run.call_args[0][0] == ["ipmitool", "lan", "print", "1"]


def test_password_masked_in_log(caplog):
    """Test the -P argument never reaches the log"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout="", stderr="", returncode=0)
        with caplog.at_level(logging.DEBUG, logger="oobsetup.backend.shell"):
            run(["ipmitool", "-H", "bmc1", "-U", "ADMIN", "-P", "hunter2", "mc", "info"])

    assert "hunter2" not in caplog.text
    assert "-P ***" in caplog.text


def test_mask_secrets_without_password():
    assert mask_secrets(["racadm", "get", "iDRAC.NIC"]) == "racadm get iDRAC.NIC"


def test_positional_secrets_masked(caplog):
    """Test every occurrence of a named secret is hidden"""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(stdout="", stderr="", returncode=0)
        with caplog.at_level(logging.DEBUG, logger="oobsetup.backend.shell"):
            run(["ipmitool", "user", "set", "password", "2", "TopSecret9"], secrets=["TopSecret9"])

    assert "TopSecret9" not in caplog.text
    assert "user set password 2 ***" in caplog.text
    # the real value still reaches the tool
    assert mock_run.call_args[0][0][-1] == "TopSecret9"


def test_mask_secrets_ignores_empty_values():
    assert mask_secrets(["ipmitool", "user", "list", ""], secrets=[""]) == "ipmitool user list "
