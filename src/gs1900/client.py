"""SSH client for Zyxel GS1900 switches.

Opens an interactive shell over SSH, runs CLI commands and parses their
output into typed records. The shell is a single conversation, so a
client must not be used from several threads at once.

Usage:
    with GS1900Client.open("192.0.2.10", "admin", "secret") as switch:
        info = switch.basic_info()
        print(f"{info.system_name} running {info.firmware_version}")
        for neighbor in switch.lldp_info():
            print(neighbor.port, neighbor.system_name)
"""

from __future__ import annotations

import logging

import paramiko

from gs1900.config import Config, WebConfig
from gs1900.errors import ConnectivityError, PreconditionError, ProtocolError
from gs1900.parsers import (
    find_mac_entry,
    find_port,
    parse_basic_info,
    parse_cable_diagnosis,
    parse_fiber_info,
    parse_interface_status,
    parse_interface_traffic,
    parse_lldp_neighbors,
    parse_mac_table,
    parse_poe_debug,
    parse_poe_info,
    parse_vlan_table,
)
from gs1900.protocol import (
    DEFAULT_READ_TIMEOUT,
    LOGIN_BANNER,
    PROMPT_MAX_BYTES,
    ResponseCollector,
    ShellChannel,
    normalize_output,
)
from gs1900.types import (
    BasicInfo,
    CableDiagnosis,
    FiberInfo,
    InterfaceStatus,
    InterfaceTrafficStatus,
    LLDPNeighbor,
    MacAddress,
    MacEntry,
    PoEDebug,
    PoEInfo,
    PoELimitMode,
    PoEPowerMode,
    PoEPriority,
    PortDuplex,
    PortSpeed,
    VLANInfo,
)
from gs1900.web import WebClient

logger = logging.getLogger(__name__)


def _recv_exact(channel: ShellChannel, nbytes: int) -> bytes:
    """Read exactly nbytes, or fewer if the channel closes."""
    data = b""
    while len(data) < nbytes:
        chunk = channel.recv(nbytes - len(data))
        if not chunk:
            break
        data += chunk
    return data


class GS1900Client:
    """An open CLI session on one switch.

    Use GS1900Client.open() or GS1900Client.from_config() to connect;
    the constructor takes an already established shell channel.

    Args:
        channel: Interactive shell channel, past the login banner.
        prompt: Prompt string captured at login.
        ssh: The owning paramiko client, closed with the session.
        address: Switch address, reused for the HTTP control plane.
        username: Login user, reused for the HTTP control plane.
        password: Login password, reused for the HTTP control plane.
        read_timeout: Seconds of silence taken as end of output.
        web_config: HTTP control plane settings (default: enabled).
    """

    def __init__(
        self,
        channel: ShellChannel,
        prompt: str,
        *,
        ssh: paramiko.SSHClient | None = None,
        address: str = "",
        username: str = "",
        password: str = "",
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        web_config: WebConfig | None = None,
    ) -> None:
        self._channel = channel
        self._ssh = ssh
        self.prompt = prompt
        self.address = address
        self._username = username
        self._password = password
        self._web_config = web_config or WebConfig()
        self._collector = ResponseCollector(channel, prompt, read_timeout)

    @classmethod
    def open(
        cls,
        address: str,
        username: str,
        password: str,
        *,
        port: int = 22,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        connect_timeout: float = 10.0,
        web_config: WebConfig | None = None,
    ) -> GS1900Client:
        """Connect, authenticate and start the switch's CLI shell.

        Raises:
            ConnectivityError: Connecting, the SSH handshake,
                authentication or reading the login output failed.
            ProtocolError: The shell did not start with the expected
                clear-screen banner.
        """
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        logger.debug("Connecting to %s:%d as %s", address, port, username)
        try:
            ssh.connect(
                address,
                port=port,
                username=username,
                password=password,
                timeout=connect_timeout,
                look_for_keys=False,
                allow_agent=False,
            )
            channel = ssh.invoke_shell()
            channel.settimeout(connect_timeout)
            banner = _recv_exact(channel, len(LOGIN_BANNER))
            if banner != LOGIN_BANNER:
                raise ProtocolError(
                    f"Unexpected login banner from {address}: {banner!r}", raw=banner
                )
            prompt = channel.recv(PROMPT_MAX_BYTES).decode("utf-8", errors="replace")
        except (paramiko.SSHException, OSError) as exc:
            ssh.close()
            raise ConnectivityError(f"Failed to open shell on {address}: {exc}") from exc
        except ProtocolError:
            ssh.close()
            raise

        logger.debug("Shell open on %s, prompt %r", address, prompt)
        return cls(
            channel,
            prompt,
            ssh=ssh,
            address=address,
            username=username,
            password=password,
            read_timeout=read_timeout,
            web_config=web_config,
        )

    @classmethod
    def from_config(cls, config: Config) -> GS1900Client:
        """Open a session using settings loaded by gs1900.config."""
        return cls.open(
            config.device.address,
            config.device.username,
            config.device.password,
            port=config.device.ssh_port,
            read_timeout=config.session.read_timeout,
            connect_timeout=config.session.connect_timeout,
            web_config=config.web,
        )

    def close(self) -> None:
        """Close the shell channel and the SSH connection."""
        close_channel = getattr(self._channel, "close", None)
        if close_channel is not None:
            close_channel()
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None

    def __enter__(self) -> GS1900Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def run(self, command: str) -> str:
        """Run one CLI command and return its cleaned-up output.

        Raises:
            ConnectivityError: Writing or reading the shell failed.
            ProtocolError: The output did not end at the prompt.
        """
        logger.debug("Running %r", command)
        try:
            self._channel.sendall(f"{command}\n".encode())
        except (OSError, paramiko.SSHException) as exc:
            raise ConnectivityError(f"Failed to send {command!r}: {exc}") from exc
        return normalize_output(self._collector.collect(), self.prompt)

    # -- Queries ----------------------------------------------------------

    def basic_info(self) -> BasicInfo:
        return parse_basic_info(self.run("show info"))

    def lldp_info(self) -> list[LLDPNeighbor]:
        return parse_lldp_neighbors(self.run("show lldp neighbor"))

    def fiber_info(self) -> list[FiberInfo]:
        return parse_fiber_info(self.run("show fiber-transceiver interfaces all"))

    def mac_table(self) -> list[MacEntry]:
        return parse_mac_table(self.run("show mac address-table"))

    def mac_table_port(self, port: int) -> list[MacEntry]:
        """MAC table entries learned on one port."""
        return parse_mac_table(self.run(f"show mac address-table interfaces {port}"))

    def lookup_mac_address(self, mac: MacAddress) -> MacEntry | None:
        """Find where a MAC address was learned, or None if unknown."""
        entries = parse_mac_table(self.run(f"show mac address-table {mac}"))
        return find_mac_entry(entries, mac)

    def poe_debug(self) -> list[PoEDebug]:
        return parse_poe_debug(self.run("debug ilpower port status"))

    def poe_info(self) -> PoEInfo:
        return parse_poe_info(self.run("show power inline consumption"))

    def cable_info(self) -> list[CableDiagnosis]:
        """Run cable diagnostics on all copper ports."""
        return parse_cable_diagnosis(self.run("show cable-diag interfaces all"))

    def cable_info_port(self, port: int) -> CableDiagnosis | None:
        records = parse_cable_diagnosis(self.run(f"show cable-diag interfaces {port}"))
        return find_port(records, port)

    def interface_info(self) -> list[InterfaceTrafficStatus]:
        return parse_interface_traffic(self.run("show interfaces all"))

    def interface_info_port(self, port: int) -> InterfaceTrafficStatus:
        """Link state and counters of one port.

        Raises:
            ProtocolError: The switch printed no block for the port.
        """
        text = self.run(f"show interfaces {port}")
        record = find_port(parse_interface_traffic(text), port)
        if record is None:
            raise ProtocolError(f"No interface statistics for port {port}", raw=text)
        return record

    def interface_status_info(self) -> list[InterfaceStatus]:
        return parse_interface_status(self.run("show interfaces all status"))

    def vlan_info(self) -> list[VLANInfo]:
        return parse_vlan_table(self.run("show vlan"))

    def nop(self) -> None:
        """Send an empty line to keep the session alive."""
        self.run("")

    # -- HTTP control -----------------------------------------------------

    def web(self) -> WebClient:
        """Return an HTTP control client for the same switch and login.

        Raises:
            PreconditionError: The HTTP control plane is disabled in
                the configuration.
        """
        if not self._web_config.enabled:
            raise PreconditionError(f"HTTP control is disabled for {self.address}")
        return WebClient(
            self.address,
            self._username,
            self._password,
            timeout=self._web_config.timeout,
            login_delay=self._web_config.login_delay,
        )

    def control_poe(
        self,
        port: int,
        enabled: bool,
        priority: PoEPriority,
        power_mode: PoEPowerMode,
        range_detection: bool,
        limit_mode: PoELimitMode,
        power_limit: int,
    ) -> None:
        """Set a port's PoE configuration over HTTP. See WebClient.control_poe."""
        self.web().control_poe(
            port, enabled, priority, power_mode, range_detection, limit_mode, power_limit
        )

    def control_port(
        self,
        port: int,
        label: str,
        enabled: bool,
        speed: PortSpeed,
        duplex: PortDuplex,
        flow_control: bool,
    ) -> None:
        """Set a port's basic configuration over HTTP. See WebClient.control_port."""
        self.web().control_port(port, label, enabled, speed, duplex, flow_control)
