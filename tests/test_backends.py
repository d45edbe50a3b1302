"""
Tests for the ipmitool and racadm backends
"""

import pytest
from unittest.mock import patch

from oobsetup.backend.ipmitool import IpmitoolBackend, completion_code
from oobsetup.backend.racadm import RacadmBackend
from oobsetup.backend.shell import ShellResult
from oobsetup.errors import (
    InvalidValueError,
    ShellExecutionError,
    UnsupportedFeatureError,
    UnsupportedTargetError,
)
from oobsetup.models import HostTarget, VendorType

# Test Data
MOCK_CC_STDERR = (
    "Unable to send RAW command (channel=0x0 netfn=0x30 lun=0x0 cmd=0x68 rsp=0xcc): "
    "Invalid data field in request\n"
)

MOCK_RACADM_HOSTNAME = """[Key=iDRAC.Embedded.1#NIC.1]
DNSRacName=web01-oob
"""

MOCK_RACADM_USERS = """iDRAC.Users.1 [Key=iDRAC.Embedded.1#Users.1]
iDRAC.Users.2 [Key=iDRAC.Embedded.1#Users.2]
iDRAC.Users.3 [Key=iDRAC.Embedded.1#Users.3]
"""

MOCK_LAN_PRINT = """IP Address Source       : DHCP Address
IP Address              : 10.0.0.5
Subnet Mask             : 255.255.255.0
"""

LOCAL = HostTarget(address="localhost", vendor=VendorType.SMC)
REMOTE = HostTarget(address="10.1.1.1", vendor=VendorType.SMC, username="ADMIN", password="s3cret")


@pytest.fixture
def mock_shell():
    with patch("oobsetup.backend.shell.run") as mock_run:
        mock_run.return_value = ShellResult("", "", 0)
        yield mock_run


class TestIpmitoolBaseCommand:
    """Test credential handling"""

    def test_localhost(self):
        assert IpmitoolBackend(LOCAL).base_command() == ["ipmitool"]
        assert IpmitoolBackend(LOCAL).base_command(default_password=True) == ["ipmitool"]

    def test_remote(self):
        assert IpmitoolBackend(REMOTE).base_command() == [
            "ipmitool", "-H", "10.1.1.1", "-U", "ADMIN", "-P", "s3cret"
        ]

    def test_remote_default_password(self):
        assert IpmitoolBackend(REMOTE).base_command(default_password=True)[-2:] == ["-P", "ADMIN"]

    def test_remote_without_password(self):
        backend = IpmitoolBackend(HostTarget(address="10.1.1.1", password=None))
        with pytest.raises(InvalidValueError, match="No user and password"):
            backend.base_command()


class TestIpmitoolRaw:
    """Test raw command execution"""

    def test_raw_parses_reply(self, mock_shell):
        mock_shell.return_value = ShellResult(" 01 00 7f\n", "", 0)
        out = IpmitoolBackend(LOCAL).raw([0x30, 0x68, 0x01, 0x00, 0x00])
        assert out == [0x01, 0x00, 0x7F]
        mock_shell.assert_called_once_with(["ipmitool", "raw", "0x30", "0x68", "0x01", "0x00", "0x00"])

    def test_get_and_set(self, mock_shell):
        backend = IpmitoolBackend(LOCAL)
        backend.get("networkmode")
        backend.set("ntp", [0x61, 0x00], sub_command=[0x01])
        assert mock_shell.call_args_list[0][0][0] == ["ipmitool", "raw", "0x30", "0x70", "0x0c", "0x00"]
        assert mock_shell.call_args_list[1][0][0] == [
            "ipmitool", "raw", "0x30", "0x68", "0x01", "0x01", "0x01", "0x61", "0x00"
        ]

    def test_enabled_returns_remaining_bytes(self, mock_shell):
        mock_shell.return_value = ShellResult(" 01 08 00 01\n", "", 0)
        enabled, rest = IpmitoolBackend(LOCAL).enabled("ntp")
        assert enabled
        assert rest == [0x08, 0x00, 0x01]

    def test_enabled_false(self, mock_shell):
        mock_shell.return_value = ShellResult(" 00 08\n", "", 0)
        assert IpmitoolBackend(LOCAL).enabled("ntp") == (False, [0x08])

    def test_invalid_payload(self, mock_shell):
        with pytest.raises(InvalidValueError):
            IpmitoolBackend(LOCAL).raw([0x30, 0x100])
        mock_shell.assert_not_called()

    def test_completion_code(self):
        assert completion_code(MOCK_CC_STDERR) == 0xCC
        assert completion_code("Error in open session") is None

    def test_unsupported_feature(self, mock_shell):
        """Test completion code 0xcc becomes UnsupportedFeatureError"""
        mock_shell.side_effect = ShellExecutionError(["ipmitool"], 1, "", MOCK_CC_STDERR)
        with pytest.raises(UnsupportedFeatureError) as exc:
            IpmitoolBackend(LOCAL).get("ddns", [0x00])
        assert exc.value.completion_code == 0xCC

    def test_unsupported_feature_message_fallback(self, mock_shell):
        mock_shell.side_effect = ShellExecutionError(["ipmitool"], 1, "", "Invalid data field in request")
        with pytest.raises(UnsupportedFeatureError):
            IpmitoolBackend(LOCAL).get("ntp", [0x00])

    def test_other_failure_propagates(self, mock_shell):
        stderr = "Unable to send RAW command (channel=0x0 netfn=0x30 lun=0x0 cmd=0x47 rsp=0xc1): Invalid command"
        mock_shell.side_effect = ShellExecutionError(["ipmitool"], 1, "", stderr)
        with pytest.raises(ShellExecutionError):
            IpmitoolBackend(LOCAL).get("hostname")

    def test_lan_print(self, mock_shell):
        mock_shell.return_value = ShellResult(MOCK_LAN_PRINT, "", 0)
        data = IpmitoolBackend(REMOTE).lan_print()
        assert data["IP Address Source"] == "DHCP Address"
        assert mock_shell.call_args[0][0][-3:] == ["lan", "print", "1"]


class TestRacadm:
    """Test racadm text protocol"""

    def test_get(self, mock_shell):
        mock_shell.return_value = ShellResult(MOCK_RACADM_HOSTNAME, "", 0)
        assert RacadmBackend(LOCAL).get("iDRAC.NIC.DNSRacName") == "web01-oob"
        mock_shell.assert_called_once_with(["racadm", "get", "iDRAC.NIC.DNSRacName"])

    def test_get_multi(self, mock_shell):
        mock_shell.return_value = ShellResult(MOCK_RACADM_HOSTNAME + "\nDNSRegister=Enabled\n", "", 0)
        assert RacadmBackend(LOCAL).get_multi("iDRAC.NIC") == {
            "DNSRacName": "web01-oob",
            "DNSRegister": "Enabled",
        }

    def test_set(self, mock_shell):
        RacadmBackend(LOCAL).set("iDRAC.NIC.DNSRegister", "Enabled")
        mock_shell.assert_called_once_with(["racadm", "set", "iDRAC.NIC.DNSRegister", "Enabled"])

    def test_list_keys(self, mock_shell):
        mock_shell.return_value = ShellResult(MOCK_RACADM_USERS, "", 0)
        assert RacadmBackend(LOCAL).list_keys("iDRAC.Users") == [
            "iDRAC.Users.1", "iDRAC.Users.2", "iDRAC.Users.3"
        ]

    def test_remote_unsupported(self, mock_shell):
        with pytest.raises(UnsupportedTargetError):
            RacadmBackend(REMOTE).get("iDRAC.NIC.DNSRacName")
        mock_shell.assert_not_called()
