"""GS1900 value types and result records.

Addresses, enumerations and the port speed pair are parsed strictly from
the literals the switch prints: every enumeration has exactly one
literal table, and a literal missing from it raises MalformedDataError
rather than falling back to a default. Records are frozen dataclasses
built fresh for every query.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import TypeVar

from gs1900.errors import MalformedDataError

_T = TypeVar("_T")

_HEX_OCTET_RE = re.compile(r"[0-9A-Fa-f]{2}")
_DEC_OCTET_RE = re.compile(r"[0-9]{1,3}")


def _lookup(table: dict[str, _T], literal: str, what: str) -> _T:
    """Map a device literal through its table, failing on anything else."""
    try:
        return table[literal]
    except KeyError:
        raise MalformedDataError(f"Unknown {what}: {literal!r}") from None


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class MacAddress:
    """A 6-byte Ethernet MAC address.

    Formats as lowercase colon-separated hex (aa:bb:cc:dd:ee:ff).
    """

    octets: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.octets, bytes) or len(self.octets) != 6:
            raise MalformedDataError(f"MAC address must be 6 bytes, got {self.octets!r}")

    @classmethod
    def parse(cls, text: str) -> MacAddress:
        """Parse exactly six colon-separated groups of two hex digits.

        >>> MacAddress.parse('00:13:49:AA:bb:0c')
        MacAddress('00:13:49:aa:bb:0c')
        """
        groups = text.split(":")
        if len(groups) != 6 or not all(_HEX_OCTET_RE.fullmatch(g) for g in groups):
            raise MalformedDataError(f"Invalid MAC address: {text!r}")
        return cls(bytes(int(g, 16) for g in groups))

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.octets)

    def __repr__(self) -> str:
        return f"MacAddress({str(self)!r})"


@dataclass(frozen=True, order=True)
class IPv4Address:
    """A 4-byte IPv4 address in dotted-decimal form."""

    octets: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.octets, bytes) or len(self.octets) != 4:
            raise MalformedDataError(f"IPv4 address must be 4 bytes, got {self.octets!r}")

    @classmethod
    def parse(cls, text: str) -> IPv4Address:
        """Parse exactly four dot-separated decimal groups (0-255).

        >>> IPv4Address.parse('192.168.1.1')
        IPv4Address('192.168.1.1')
        """
        groups = text.split(".")
        if len(groups) != 4 or not all(_DEC_OCTET_RE.fullmatch(g) for g in groups):
            raise MalformedDataError(f"Invalid IPv4 address: {text!r}")
        values = [int(g) for g in groups]
        if any(v > 255 for v in values):
            raise MalformedDataError(f"Invalid IPv4 address: {text!r}")
        return cls(bytes(values))

    def __str__(self) -> str:
        return ".".join(str(b) for b in self.octets)

    def __repr__(self) -> str:
        return f"IPv4Address({str(self)!r})"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class MacEntryType(enum.Enum):
    """Origin of a MAC address table entry."""

    MANAGEMENT = "management"
    DYNAMIC = "dynamic"
    STATIC = "static"

    @classmethod
    def parse(cls, literal: str) -> MacEntryType:
        return _lookup(_MAC_ENTRY_TYPES, literal, "MAC entry type")


class SFPStatus(enum.Enum):
    """Alarm state of one SFP diagnostic reading."""

    NOT_AVAILABLE = "n/a"
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def parse(cls, literal: str) -> SFPStatus:
        return _lookup(_SFP_STATUSES, literal, "SFP status")


class PoEClass(enum.Enum):
    """IEEE PoE power classification of the attached device."""

    CLASS0 = 0  # 0.44 - 12.94 W
    CLASS1 = 1  # 0.44 - 3.84 W
    CLASS2 = 2  # 3.84 - 6.49 W
    CLASS3 = 3  # 6.49 - 12.95 W
    CLASS4 = 4  # 12.95 - 25.50 W (802.3at)

    @classmethod
    def parse(cls, literal: str) -> PoEClass:
        return _lookup(_POE_CLASSES, literal, "PoE class")


class PoEPriority(enum.Enum):
    """PoE port priority used when the power budget runs out."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, literal: str) -> PoEPriority:
        return _lookup(_POE_PRIORITIES, literal, "PoE priority")


class PoEStatus(enum.Enum):
    """PoE delivery state of a port."""

    OFF = "off"
    SEARCHING = "searching"
    ON = "on"

    @classmethod
    def parse(cls, literal: str) -> PoEStatus:
        return _lookup(_POE_STATUSES, literal, "PoE status")


class PoEMode(enum.Enum):
    """PoE power allocation mode of the switch."""

    CLASSIFICATION = "classification"  # allocate by device class
    CONSUMPTION = "consumption"        # allocate by measured draw

    @classmethod
    def parse(cls, literal: str) -> PoEMode:
        return _lookup(_POE_MODES, literal, "PoE management mode")


class PoEPowerUpSequence(enum.Enum):
    """Order in which PoE ports are powered after boot."""

    STAGGERED = "staggered"
    SIMULTANEOUS = "simultaneous"

    @classmethod
    def parse(cls, literal: str) -> PoEPowerUpSequence:
        return _lookup(_POE_POWER_UP_SEQUENCES, literal, "PoE power-up sequence")


class PoEPowerMode(enum.Enum):
    """PoE standard a port is configured for (HTTP control only)."""

    IEEE_802_3AF = "802.3af"
    LEGACY = "legacy"
    PRE_802_3AT = "pre-802.3at"
    IEEE_802_3AT = "802.3at"


class PoELimitMode(enum.Enum):
    """How a port's power limit is chosen (HTTP control only)."""

    CLASSIFICATION = "classification"
    USER = "user"


class CablePairState(enum.Enum):
    """Cable diagnostic result for one wire pair."""

    NORMAL = "normal"                # connected to a running device
    OPEN = "open"                    # nothing connected
    LINE_DRIVER = "line-driver"      # connected to a powered-off device
    IMPEDANCE_MISMATCH = "impedance"  # impedance outside 70-130 Ohm

    @classmethod
    def parse(cls, literal: str) -> CablePairState:
        return _lookup(_CABLE_PAIR_STATES, literal, "cable pair state")


class PortDuplex(enum.Enum):
    """Configured or negotiated port duplex."""

    AUTO = "auto"
    FULL = "full"
    HALF = "half"

    @classmethod
    def parse(cls, literal: str) -> PortDuplex:
        return _lookup(_PORT_DUPLEXES, literal, "port duplex")


class MediaType(enum.Enum):
    """Physical medium of a port."""

    COPPER = "copper"  # RJ45
    FIBER = "fiber"    # SFP

    @classmethod
    def parse(cls, literal: str) -> MediaType:
        return _lookup(_MEDIA_TYPES, literal, "media type")


class VLANType(enum.Enum):
    """How a VLAN came to exist."""

    DEFAULT = "default"
    STATIC = "static"
    DYNAMIC = "dynamic"

    @classmethod
    def parse(cls, literal: str) -> VLANType:
        return _lookup(_VLAN_TYPES, literal, "VLAN type")


_MAC_ENTRY_TYPES = {
    "Management": MacEntryType.MANAGEMENT,
    "Dynamic": MacEntryType.DYNAMIC,
    "Static": MacEntryType.STATIC,
}

_SFP_STATUSES = {
    "N/A": SFPStatus.NOT_AVAILABLE,
    "OK": SFPStatus.OK,
    "W": SFPStatus.WARNING,
    "E": SFPStatus.ERROR,
}

_POE_CLASSES = {
    "class0": PoEClass.CLASS0,
    "class1": PoEClass.CLASS1,
    "class2": PoEClass.CLASS2,
    "class3": PoEClass.CLASS3,
    "class4": PoEClass.CLASS4,
}

_POE_PRIORITIES = {
    "low": PoEPriority.LOW,
    "medium": PoEPriority.MEDIUM,
    "high": PoEPriority.HIGH,
    "critical": PoEPriority.CRITICAL,
}

_POE_STATUSES = {
    "off": PoEStatus.OFF,
    "searching": PoEStatus.SEARCHING,
    "on": PoEStatus.ON,
}

_POE_MODES = {
    "Class limit mode": PoEMode.CLASSIFICATION,
    "Port limit mode": PoEMode.CONSUMPTION,
}

_POE_POWER_UP_SEQUENCES = {
    "Staggered": PoEPowerUpSequence.STAGGERED,
    "Simultaneous": PoEPowerUpSequence.SIMULTANEOUS,
}

_CABLE_PAIR_STATES = {
    "Normal": CablePairState.NORMAL,
    "Open": CablePairState.OPEN,
    "LineDriver": CablePairState.LINE_DRIVER,
    "ImpedanceMis": CablePairState.IMPEDANCE_MISMATCH,
}

# The switch spells duplex differently in "show interfaces" and
# "show interfaces status", so several literals share a member.
_PORT_DUPLEXES = {
    "Auto": PortDuplex.AUTO,
    "auto": PortDuplex.AUTO,
    "Full": PortDuplex.FULL,
    "full": PortDuplex.FULL,
    "a-full": PortDuplex.FULL,
    "Half": PortDuplex.HALF,
    "half": PortDuplex.HALF,
    "a-half": PortDuplex.HALF,
}

_MEDIA_TYPES = {
    "Copper": MediaType.COPPER,
    "Fiber": MediaType.FIBER,
}

_VLAN_TYPES = {
    "Default": VLANType.DEFAULT,
    "Static": VLANType.STATIC,
    "Dynamic": VLANType.DYNAMIC,
}


class LLDPCapability(enum.Flag):
    """System capabilities advertised by an LLDP neighbor."""

    STATION = enum.auto()
    BRIDGE = enum.auto()
    WLAN = enum.auto()
    ROUTER = enum.auto()
    TELEPHONE = enum.auto()

    @classmethod
    def parse(cls, text: str) -> LLDPCapability:
        """Parse a comma-separated capability phrase list.

        An empty field means no capabilities. Phrase order and
        repetition do not matter.

        >>> LLDPCapability.parse('Bridge, Router') == (
        ...     LLDPCapability.BRIDGE | LLDPCapability.ROUTER)
        True
        """
        caps = cls(0)
        if not text:
            return caps
        for phrase in text.split(", "):
            caps |= _lookup(_LLDP_CAPABILITIES, phrase, "LLDP capability")
        return caps


_LLDP_CAPABILITIES = {
    "Station Only": LLDPCapability.STATION,
    "Bridge": LLDPCapability.BRIDGE,
    "WLAN": LLDPCapability.WLAN,
    "Router": LLDPCapability.ROUTER,
    "Telephone": LLDPCapability.TELEPHONE,
}


@dataclass(frozen=True)
class PortSpeed:
    """Port speed setting or negotiation result.

    Attributes:
        auto: Speed is auto-negotiated.
        speed: Nominal rate in Mbit/s (0 when auto and not yet linked).
    """

    auto: bool
    speed: int

    @classmethod
    def parse(cls, literal: str) -> PortSpeed:
        """Map one of the switch's speed spellings to a PortSpeed.

        The switch uses different unit suffixes in different commands,
        so this is a literal table rather than numeric parsing.

        >>> PortSpeed.parse('a-100M')
        PortSpeed(auto=True, speed=100)
        """
        return _lookup(_PORT_SPEEDS, literal, "port speed")


_PORT_SPEEDS = {
    "auto": PortSpeed(auto=True, speed=0),
    "Auto": PortSpeed(auto=True, speed=0),
    "a-1000M": PortSpeed(auto=True, speed=1000),
    "1000M": PortSpeed(auto=False, speed=1000),
    "1000Mb": PortSpeed(auto=False, speed=1000),
    "1000Mb/s": PortSpeed(auto=False, speed=1000),
    "a-100M": PortSpeed(auto=True, speed=100),
    "100M": PortSpeed(auto=False, speed=100),
    "100Mb": PortSpeed(auto=False, speed=100),
    "100Mb/s": PortSpeed(auto=False, speed=100),
    "a-10M": PortSpeed(auto=True, speed=10),
    "10M": PortSpeed(auto=False, speed=10),
    "10Mb": PortSpeed(auto=False, speed=10),
    "10Mb/s": PortSpeed(auto=False, speed=10),
}


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BasicInfo:
    """System information from ``show info``.

    Attributes:
        system_name: Configured system name.
        system_location: Configured system location.
        system_contact: Configured system contact.
        mac_address: System MAC address.
        ip_address: Management IPv4 address.
        subnet_mask: Management subnet mask.
        boot_version: Boot loader version.
        firmware_version: Firmware version.
        system_object_id: SNMP system object ID.
        system_uptime: Uptime in seconds.
    """

    system_name: str
    system_location: str
    system_contact: str
    mac_address: MacAddress
    ip_address: IPv4Address
    subnet_mask: IPv4Address
    boot_version: str
    firmware_version: str
    system_object_id: str
    system_uptime: int


@dataclass(frozen=True)
class LLDPNeighbor:
    """One row of ``show lldp neighbor``.

    Attributes:
        port: Local port number.
        device_id: Remote chassis ID.
        port_id: Remote port ID.
        system_name: Remote system name.
        capabilities: Remote system capabilities.
        ttl: Remaining time to live of the entry, in seconds.
    """

    port: int
    device_id: str
    port_id: str
    system_name: str
    capabilities: LLDPCapability
    ttl: int


@dataclass(frozen=True)
class MacEntry:
    """One row of the MAC address table.

    Attributes:
        vlan_id: VLAN the address was learned on.
        mac_address: The learned address.
        entry_type: Management, dynamic or static.
        ports: Port list as printed by the switch (e.g. "5" or "CPU").
    """

    vlan_id: int
    mac_address: MacAddress
    entry_type: MacEntryType
    ports: str


@dataclass(frozen=True)
class FiberInfo:
    """SFP digital diagnostics for one port.

    Readings are integers in tenths of the unit the switch displays
    (e.g. 25.0 C is 250). Only the temperature can be negative.
    """

    port: int
    temperature: int
    temperature_status: SFPStatus
    voltage: int
    voltage_status: SFPStatus
    current: int
    current_status: SFPStatus
    output_power: int
    output_power_status: SFPStatus
    input_power: int
    input_power_status: SFPStatus
    present: bool
    link: bool


@dataclass(frozen=True)
class PoEDebug:
    """One row of ``debug ilpower port status``."""

    port: int
    status: PoEStatus
    priority: PoEPriority
    poe_class: PoEClass
    reason: str


@dataclass(frozen=True)
class PoEConfig:
    """Global PoE settings.

    Attributes:
        management_mode: Classification- or consumption-based allocation.
        pre_allocation: Whether power pre-allocation is enabled.
        power_up_sequence: Staggered or simultaneous power-up.
    """

    management_mode: PoEMode
    pre_allocation: bool
    power_up_sequence: PoEPowerUpSequence


@dataclass(frozen=True)
class PoESupply:
    """One PoE power supply unit; powers are in watts."""

    unit: int
    power: str
    status: str
    nominal_power: int
    allocated_power: int
    consumed_power: int
    available_power: int


@dataclass(frozen=True)
class PoEPort:
    """PoE consumption of one port.

    Attributes:
        port: Port number.
        power_limit: Effective power limit in mW.
        admin_power_limit: Administratively configured limit in mW.
        power: Delivered power in mW.
        voltage: Port voltage in mV.
        current: Port current in mA.
    """

    port: int
    power_limit: int
    admin_power_limit: int
    power: int
    voltage: int
    current: int


@dataclass(frozen=True)
class PoEInfo:
    """Everything reported by ``show power inline consumption``."""

    config: PoEConfig
    supplies: tuple[PoESupply, ...]
    ports: tuple[PoEPort, ...]


@dataclass(frozen=True)
class CablePairStatus:
    """Cable diagnostic result for one wire pair.

    Attributes:
        pair: Pair letter, "A" to "D".
        length: Estimated cable length in cm.
        status: Pair state.
    """

    pair: str
    length: int
    status: CablePairState


@dataclass(frozen=True)
class CableDiagnosis:
    """Cable diagnostics for one port, one entry per pair A-D."""

    port: int
    speed: PortSpeed
    pairs: tuple[CablePairStatus, CablePairStatus, CablePairStatus, CablePairStatus]


@dataclass(frozen=True)
class InterfaceStatus:
    """One row of ``show interfaces all status``."""

    port: int
    name: str
    connected: bool
    vlan: int
    duplex: PortDuplex
    speed: PortSpeed
    media_type: MediaType


@dataclass(frozen=True)
class InterfaceTrafficStatus:
    """Link state and traffic counters from ``show interfaces``."""

    port: int
    up: bool
    duplex: PortDuplex
    speed: PortSpeed
    media_type: MediaType
    flow_control: bool
    input_packets: int
    input_bytes: int
    input_throttles: int
    input_broadcasts: int
    input_multicasts: int
    input_runts: int
    input_giants: int
    input_errors: int
    input_crc: int
    input_frame: int
    input_overrun: int
    input_ignored: int
    input_pause: int
    input_dribble: int
    output_packets: int
    output_bytes: int
    output_underrun: int
    output_errors: int
    output_collisions: int
    output_interface_resets: int
    output_babbles: int
    output_late_collisions: int
    output_deferred: int
    output_paused: int


@dataclass(frozen=True)
class VLANInfo:
    """One row of ``show vlan``.

    Attributes:
        vlan_id: 802.1Q VLAN ID.
        name: VLAN name.
        ports_untagged: Untagged member ports as printed (e.g. "1-8").
        ports_tagged: Tagged member ports as printed.
        vlan_type: Default, static or dynamic.
    """

    vlan_id: int
    name: str
    ports_untagged: str
    ports_tagged: str
    vlan_type: VLANType
