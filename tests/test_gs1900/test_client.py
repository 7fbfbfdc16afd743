"""Tests for the GS1900 SSH client.

Uses a scripted shell channel and a mocked paramiko.SSHClient, so no
switch is needed.
"""

from unittest.mock import MagicMock, patch

import paramiko
import pytest

from gs1900.client import GS1900Client
from gs1900.config import Config, DeviceConfig, SessionConfig, WebConfig
from gs1900.errors import ConnectivityError, PreconditionError, ProtocolError
from gs1900.protocol import LOGIN_BANNER
from gs1900.types import (
    MacAddress,
    MacEntryType,
    PoELimitMode,
    PoEPowerMode,
    PoEPriority,
    PortDuplex,
    PortSpeed,
)


def _response(prompt, *lines):
    body = "".join(f"{line}\r\n" for line in lines)
    return (body + prompt).encode()


def _client(channel_factory, prompt, read_timeout, *responses, **kwargs):
    script = []
    for response in responses:
        script += [response, read_timeout]
    channel = channel_factory(script)
    return GS1900Client(channel, prompt, **kwargs), channel


class TestOpen:
    @patch("gs1900.client.paramiko.SSHClient")
    def test_reads_banner_and_prompt(self, mock_ssh_cls):
        """open() should consume the banner and capture the prompt."""
        ssh = mock_ssh_cls.return_value
        channel = ssh.invoke_shell.return_value
        channel.recv.side_effect = [LOGIN_BANNER[:3], LOGIN_BANNER[3:], b"GS1900# "]

        client = GS1900Client.open("192.0.2.10", "admin", "secret", port=2222)

        assert client.prompt == "GS1900# "
        assert client.address == "192.0.2.10"
        ssh.connect.assert_called_once_with(
            "192.0.2.10",
            port=2222,
            username="admin",
            password="secret",
            timeout=10.0,
            look_for_keys=False,
            allow_agent=False,
        )

    @patch("gs1900.client.paramiko.SSHClient")
    def test_unexpected_banner(self, mock_ssh_cls):
        """A wrong banner should close the connection and raise."""
        ssh = mock_ssh_cls.return_value
        ssh.invoke_shell.return_value.recv.side_effect = [b"Welcome", b""]

        with pytest.raises(ProtocolError, match="banner") as exc_info:
            GS1900Client.open("192.0.2.10", "admin", "secret")
        assert exc_info.value.raw == b"Welcome"
        ssh.close.assert_called_once()

    @patch("gs1900.client.paramiko.SSHClient")
    def test_authentication_failure(self, mock_ssh_cls):
        """Rejected credentials should become a chained ConnectivityError."""
        ssh = mock_ssh_cls.return_value
        error = paramiko.AuthenticationException("Authentication failed.")
        ssh.connect.side_effect = error

        with pytest.raises(ConnectivityError) as exc_info:
            GS1900Client.open("192.0.2.10", "admin", "wrong")
        assert exc_info.value.__cause__ is error
        ssh.close.assert_called_once()

    @patch("gs1900.client.paramiko.SSHClient")
    def test_connection_refused(self, mock_ssh_cls):
        mock_ssh_cls.return_value.connect.side_effect = ConnectionRefusedError(111, "refused")
        with pytest.raises(ConnectivityError, match="192.0.2.10"):
            GS1900Client.open("192.0.2.10", "admin", "secret")

    @patch("gs1900.client.paramiko.SSHClient")
    def test_from_config(self, mock_ssh_cls):
        """Config values should reach the SSH connect call and the web settings."""
        ssh = mock_ssh_cls.return_value
        ssh.invoke_shell.return_value.recv.side_effect = [LOGIN_BANNER, b"sw# "]
        config = Config(
            device=DeviceConfig(address="sw1", username="admin", password="pw", ssh_port=22),
            session=SessionConfig(read_timeout=2.0, connect_timeout=5.0),
            web=WebConfig(enabled=False),
        )

        client = GS1900Client.from_config(config)

        assert client.prompt == "sw# "
        assert ssh.connect.call_args.kwargs["timeout"] == 5.0
        with pytest.raises(PreconditionError):
            client.web()


class TestRun:
    def test_sends_command_and_normalizes(self, channel_factory, prompt, read_timeout):
        """run() should send the command and strip prompt and page markers."""
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            b"show vlan\r\nrow one\r\n--More--\x08\n\x1b[A\x1b[2Krow two\r\nGS1900# ",
        )
        text = client.run("show vlan")
        assert channel.sent == [b"show vlan\n"]
        assert "--More--" not in text
        assert prompt not in text
        assert "row one" in text and "row two" in text

    def test_send_failure(self, channel_factory, prompt):
        """A failed write should raise ConnectivityError naming the command."""
        client, channel = _client(channel_factory, prompt, None)

        def broken_sendall(data):
            raise OSError("Socket is closed")

        channel.sendall = broken_sendall
        with pytest.raises(ConnectivityError, match="show info"):
            client.run("show info")

    def test_writes_whole_command_line(self, prompt):
        """The command line should go out through sendall(), never a partial send()."""
        channel = MagicMock()
        client = GS1900Client(channel, prompt)
        with patch.object(client._collector, "collect", return_value="show info\r\nGS1900# "):
            client.run("show info")
        channel.sendall.assert_called_once_with(b"show info\n")
        channel.send.assert_not_called()

    def test_nop_sends_empty_line(self, channel_factory, prompt, read_timeout):
        """nop() should send a bare newline."""
        client, channel = _client(channel_factory, prompt, read_timeout, _response(prompt, ""))
        assert client.nop() is None
        assert channel.sent == [b"\n"]

    def test_close(self, channel_factory, prompt):
        """Leaving the context should close the channel and the SSH client."""
        ssh = MagicMock()
        channel = channel_factory([])
        with GS1900Client(channel, prompt, ssh=ssh):
            pass
        assert channel.closed
        ssh.close.assert_called_once()


MAC_ROWS = (
    " VID  |    MAC Address    |    Type    |  Ports",
    "    1 | 00:11:22:33:44:55 | Dynamic    | 5",
)


class TestQueries:
    def test_mac_table_port(self, channel_factory, prompt, read_timeout):
        """mac_table_port() should filter the table by interface."""
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show mac address-table interfaces 5", *MAC_ROWS),
        )
        entries = client.mac_table_port(5)
        assert channel.sent == [b"show mac address-table interfaces 5\n"]
        assert [e.entry_type for e in entries] == [MacEntryType.DYNAMIC]

    def test_lookup_mac_address(self, channel_factory, prompt, read_timeout):
        """A known MAC should return its table entry."""
        mac = MacAddress.parse("00:11:22:33:44:55")
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show mac address-table 00:11:22:33:44:55", *MAC_ROWS),
        )
        entry = client.lookup_mac_address(mac)
        assert channel.sent == [b"show mac address-table 00:11:22:33:44:55\n"]
        assert entry is not None
        assert entry.ports == "5"

    def test_lookup_unknown_mac(self, channel_factory, prompt, read_timeout):
        """An unknown MAC should return None."""
        client, _ = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show mac address-table de:ad:be:ef:00:01", MAC_ROWS[0]),
        )
        assert client.lookup_mac_address(MacAddress.parse("de:ad:be:ef:00:01")) is None

    def test_vlan_info(self, channel_factory, prompt, read_timeout):
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show vlan", "  VID | Name | Untagged | Tagged | Type",
                      "    1 | default | 1-10 | --- | Default"),
        )
        (vlan,) = client.vlan_info()
        assert vlan.vlan_id == 1
        assert channel.sent == [b"show vlan\n"]

    def test_interface_info_port_absent(self, channel_factory, prompt, read_timeout):
        """A port with no statistics block should raise ProtocolError."""
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show interfaces 30", "% Invalid port"),
        )
        with pytest.raises(ProtocolError, match="port 30"):
            client.interface_info_port(30)
        assert channel.sent == [b"show interfaces 30\n"]

    def test_cable_info_port_absent(self, channel_factory, prompt, read_timeout):
        """A port with no diagnosis row should return None."""
        client, channel = _client(
            channel_factory, prompt, read_timeout,
            _response(prompt, "show cable-diag interfaces 26"),
        )
        assert client.cable_info_port(26) is None
        assert channel.sent == [b"show cable-diag interfaces 26\n"]

    @pytest.mark.parametrize("method,command", [
        ("basic_info", "show info"),
        ("lldp_info", "show lldp neighbor"),
        ("fiber_info", "show fiber-transceiver interfaces all"),
        ("mac_table", "show mac address-table"),
        ("poe_debug", "debug ilpower port status"),
        ("poe_info", "show power inline consumption"),
        ("cable_info", "show cable-diag interfaces all"),
        ("interface_info", "show interfaces all"),
        ("interface_status_info", "show interfaces all status"),
        ("vlan_info", "show vlan"),
    ])
    def test_command_lines(self, method, command, prompt):
        """Each query should issue its fixed CLI command."""
        client = GS1900Client(MagicMock(), prompt)
        with patch.object(client, "run", side_effect=ProtocolError("stop")) as mock_run:
            with pytest.raises(ProtocolError):
                getattr(client, method)()
        mock_run.assert_called_once_with(command)


class TestWebDelegation:
    def test_web_uses_session_credentials(self, prompt):
        """web() should reuse the SSH session's address and login."""
        client = GS1900Client(
            MagicMock(), prompt, address="sw1", username="admin", password="pw",
            web_config=WebConfig(timeout=3.0, login_delay=0.1),
        )
        web = client.web()
        assert web.address == "sw1"
        assert web.url == "http://sw1/cgi-bin/dispatcher.cgi"

    @patch("gs1900.client.WebClient")
    def test_control_poe(self, mock_web_cls, prompt):
        """control_poe() should delegate to a WebClient with the session login."""
        client = GS1900Client(MagicMock(), prompt, address="sw1", username="admin", password="pw")
        client.control_poe(
            3, True, PoEPriority.HIGH, PoEPowerMode.IEEE_802_3AT, False,
            PoELimitMode.CLASSIFICATION, 30000,
        )
        mock_web_cls.assert_called_once_with("sw1", "admin", "pw", timeout=10.0, login_delay=0.5)
        mock_web_cls.return_value.control_poe.assert_called_once_with(
            3, True, PoEPriority.HIGH, PoEPowerMode.IEEE_802_3AT, False,
            PoELimitMode.CLASSIFICATION, 30000,
        )

    @patch("gs1900.client.WebClient")
    def test_control_port(self, mock_web_cls, prompt):
        client = GS1900Client(MagicMock(), prompt, address="sw1", username="admin", password="pw")
        speed = PortSpeed(auto=True, speed=0)
        client.control_port(5, "uplink", True, speed, PortDuplex.AUTO, False)
        mock_web_cls.return_value.control_port.assert_called_once_with(
            5, "uplink", True, speed, PortDuplex.AUTO, False,
        )

    def test_web_disabled(self, prompt):
        """HTTP control should fail fast when disabled in the config."""
        client = GS1900Client(MagicMock(), prompt, web_config=WebConfig(enabled=False))
        with pytest.raises(PreconditionError, match="disabled"):
            client.control_port(5, "x", True, PortSpeed(auto=True, speed=0), PortDuplex.AUTO, False)
