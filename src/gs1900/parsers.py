"""Parsers for GS1900 CLI command output.

Each parse_* function takes the normalized text of one command's
response and returns typed records. The switch output has no schema, so
every parser encodes one firmware's layout exactly: unknown keys,
unknown literals and unparsable numbers raise MalformedDataError instead
of being skipped, so that a firmware change is noticed immediately.
Only lines that do not have the shape of a data line at all (headers,
separators, blank lines, the command echo) are skipped.

Fixed-width layouts are kept in one column table per command.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Callable, TypeVar

from gs1900.errors import MalformedDataError
from gs1900.types import (
    BasicInfo,
    CableDiagnosis,
    CablePairState,
    CablePairStatus,
    FiberInfo,
    InterfaceStatus,
    InterfaceTrafficStatus,
    IPv4Address,
    LLDPCapability,
    LLDPNeighbor,
    MacAddress,
    MacEntry,
    MacEntryType,
    MediaType,
    PoEClass,
    PoEConfig,
    PoEDebug,
    PoEInfo,
    PoEMode,
    PoEPort,
    PoEPowerUpSequence,
    PoEPriority,
    PoEStatus,
    PoESupply,
    PortDuplex,
    PortSpeed,
    SFPStatus,
    VLANInfo,
    VLANType,
)

_R = TypeVar("_R")

_UINT_RE = re.compile(r"[0-9]+")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _lines(text: str) -> list[str]:
    """Split a response into lines, dropping carriage returns."""
    return [line.rstrip("\r") for line in text.split("\n")]


def parse_uint(text: str, what: str) -> int:
    """Parse a non-negative decimal integer.

    Raises MalformedDataError for anything but plain digits.
    """
    text = text.strip()
    if not _UINT_RE.fullmatch(text):
        raise MalformedDataError(f"Invalid {what}: {text!r}")
    return int(text)


def _is_separator(column: str) -> bool:
    return bool(column) and set(column) == {"-"}


def _columns(line: str, count: int) -> list[str] | None:
    """Split a ``|``-delimited line, or None if it has too few columns."""
    cols = line.split("|")
    if len(cols) < count:
        return None
    return [c.strip() for c in cols]


def _split_key_value(line: str, separator: str) -> tuple[str, str] | None:
    """Split a ``key <sep> value`` line; None if the line has no separator.

    A line ending in the separator (empty value) yields an empty value.
    """
    key, sep, value = line.partition(separator)
    if sep:
        return key.strip(), value.strip()
    stripped = line.rstrip()
    bare = separator.rstrip()
    if bare and stripped.endswith(bare) and stripped != bare:
        return stripped[: -len(bare)].strip(), ""
    return None


def _slice_columns(line: str, layout: dict[str, slice]) -> dict[str, str]:
    return {name: line[cols].strip() for name, cols in layout.items()}


def _require_fields(found: dict, names: Iterable[str], what: str) -> None:
    missing = [name for name in names if name not in found]
    if missing:
        raise MalformedDataError(f"{what} is missing: {', '.join(missing)}")


def _build(record_type: Callable[..., _R], values: dict, what: str) -> _R:
    """Construct a record, failing if any field was not seen."""
    names = [f.name for f in dataclasses.fields(record_type)]  # type: ignore[arg-type]
    _require_fields(values, names, what)
    return record_type(**{name: values[name] for name in names})


# ---------------------------------------------------------------------------
# show info (key/value block)
# ---------------------------------------------------------------------------

_UPTIME_RE = re.compile(r"(\d+) days, (\d+) hours, (\d+) mins, (\d+) secs")


def parse_uptime(text: str) -> int:
    """Convert ``N days, N hours, N mins, N secs`` to seconds.

    >>> parse_uptime('2 days, 3 hours, 4 mins, 5 secs')
    183845
    """
    match = _UPTIME_RE.search(text)
    if match is None:
        raise MalformedDataError(f"Invalid uptime: {text!r}")
    days, hours, mins, secs = (int(g) for g in match.groups())
    return days * 86400 + hours * 3600 + mins * 60 + secs


def _text(value: str) -> str:
    return value


# key -> (field, converter)
_BASIC_INFO_KEYS: dict[str, tuple[str, Callable[[str], object]]] = {
    "System Name": ("system_name", _text),
    "System Location": ("system_location", _text),
    "System Contact": ("system_contact", _text),
    "MAC Address": ("mac_address", MacAddress.parse),
    "IP Address": ("ip_address", IPv4Address.parse),
    "Subnet Mask": ("subnet_mask", IPv4Address.parse),
    "Boot Version": ("boot_version", _text),
    "Firmware Version": ("firmware_version", _text),
    "System Object ID": ("system_object_id", _text),
    "System Up Time": ("system_uptime", parse_uptime),
}


def parse_basic_info(text: str) -> BasicInfo:
    """Parse ``show info``.

    Every line containing `` : `` must carry one of the known keys, and
    every known key must be present.
    """
    values: dict[str, object] = {}
    for line in _lines(text):
        kv = _split_key_value(line, " : ")
        if kv is None:
            continue
        key, value = kv
        if key not in _BASIC_INFO_KEYS:
            raise MalformedDataError(f"Unknown system info key: {key!r}")
        field_name, convert = _BASIC_INFO_KEYS[key]
        values[field_name] = convert(value)
    return _build(BasicInfo, values, "System info")


# ---------------------------------------------------------------------------
# Delimited tables
# ---------------------------------------------------------------------------

def parse_lldp_neighbors(text: str) -> list[LLDPNeighbor]:
    """Parse ``show lldp neighbor``.

    Columns: port | device ID | port ID | system name | capabilities | TTL
    """
    neighbors: list[LLDPNeighbor] = []
    for line in _lines(text):
        cols = _columns(line, 6)
        if cols is None or cols[0] == "Port" or _is_separator(cols[0]):
            continue
        neighbors.append(LLDPNeighbor(
            port=parse_uint(cols[0], "port number"),
            device_id=cols[1],
            port_id=cols[2],
            system_name=cols[3],
            capabilities=LLDPCapability.parse(cols[4]),
            ttl=parse_uint(cols[5], "LLDP TTL"),
        ))
    return neighbors


_TENTHS = Decimal(10)


def parse_tenths(text: str, what: str, signed: bool = False) -> int:
    """Parse a decimal reading into integer tenths.

    >>> parse_tenths('25.0', 'temperature', signed=True)
    250
    """
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise MalformedDataError(f"Invalid {what}: {text!r}") from None
    if not value.is_finite() or (value < 0 and not signed):
        raise MalformedDataError(f"Invalid {what}: {text!r}")
    return int((value * _TENTHS).quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def parse_fiber_reading(
    field: str,
    what: str,
    signed: bool = False,
) -> tuple[int, SFPStatus]:
    """Parse a ``<value>  (<status>)`` diagnostics cell.

    The value and status are separated by two spaces. A cell without
    that separator holds only a status (e.g. ``N/A``) and reads as 0.

    >>> parse_fiber_reading('25.0  (OK)', 'temperature')
    (250, <SFPStatus.OK: 'ok'>)
    """
    value_text, sep, status_text = field.partition("  ")
    if not sep:
        return 0, SFPStatus.parse(field)
    status = SFPStatus.parse(status_text.strip().replace("(", "").replace(")", ""))
    return parse_tenths(value_text, what, signed=signed), status


def parse_fiber_info(text: str) -> list[FiberInfo]:
    """Parse ``show fiber-transceiver interfaces all``.

    Columns: port | temperature | voltage | current | output power |
    input power | OE present | LOS
    """
    result: list[FiberInfo] = []
    for line in _lines(text):
        cols = _columns(line, 8)
        if cols is None or cols[0] in ("Port", "") or _is_separator(cols[0]):
            continue
        temperature, temperature_status = parse_fiber_reading(cols[1], "temperature", signed=True)
        voltage, voltage_status = parse_fiber_reading(cols[2], "voltage")
        current, current_status = parse_fiber_reading(cols[3], "current")
        output_power, output_power_status = parse_fiber_reading(cols[4], "output power")
        input_power, input_power_status = parse_fiber_reading(cols[5], "input power")
        result.append(FiberInfo(
            port=parse_uint(cols[0], "port number"),
            temperature=temperature,
            temperature_status=temperature_status,
            voltage=voltage,
            voltage_status=voltage_status,
            current=current,
            current_status=current_status,
            output_power=output_power,
            output_power_status=output_power_status,
            input_power=input_power,
            input_power_status=input_power_status,
            present=cols[6] == "Insert",
            link=cols[7] == "Normal",
        ))
    return result


def parse_mac_table(text: str) -> list[MacEntry]:
    """Parse ``show mac address-table`` (and its filtered variants).

    Columns: VID | MAC address | type | ports
    """
    entries: list[MacEntry] = []
    for line in _lines(text):
        cols = _columns(line, 4)
        if cols is None or cols[0] == "VID" or _is_separator(cols[0]):
            continue
        entries.append(MacEntry(
            vlan_id=parse_uint(cols[0], "VLAN ID"),
            mac_address=MacAddress.parse(cols[1]),
            entry_type=MacEntryType.parse(cols[2]),
            ports=cols[3],
        ))
    return entries


def parse_vlan_table(text: str) -> list[VLANInfo]:
    """Parse ``show vlan``.

    Columns: VID | name | untagged ports | tagged ports | type
    """
    vlans: list[VLANInfo] = []
    for line in _lines(text):
        cols = _columns(line, 5)
        if cols is None or cols[0] == "VID" or _is_separator(cols[0]):
            continue
        vlans.append(VLANInfo(
            vlan_id=parse_uint(cols[0], "VLAN ID"),
            name=cols[1],
            ports_untagged=cols[2],
            ports_tagged=cols[3],
            vlan_type=VLANType.parse(cols[4]),
        ))
    return vlans


_CABLE_PAIRS = ("A", "B", "C", "D")


def _parse_pair(pair: str, length: str, status: str) -> CablePairStatus | None:
    """Parse one pair cell triple; None for a pair letter outside A-D."""
    letter = pair.replace("Pair ", "").strip()[:1]
    if not letter:
        raise MalformedDataError(f"Invalid cable pair: {pair!r}")
    if letter not in _CABLE_PAIRS:
        return None
    return CablePairStatus(
        pair=letter,
        length=parse_uint(length.replace(".", ""), "cable length"),
        status=CablePairState.parse(status),
    )


def parse_cable_diagnosis(text: str) -> list[CableDiagnosis]:
    """Parse ``show cable-diag interfaces <ports>``.

    Each port is a block: one 5-column line (port | speed | pair |
    length | status) followed by 3-column lines for the other pairs,
    terminated by a blank line. Lengths are printed in metres with two
    decimals and returned in cm.
    """
    result: list[CableDiagnosis] = []
    port: int | None = None
    speed: PortSpeed | None = None
    pairs: dict[str, CablePairStatus] = {}

    def flush() -> None:
        missing = [p for p in _CABLE_PAIRS if p not in pairs]
        if missing:
            raise MalformedDataError(
                f"Cable diagnosis for port {port} is missing pair(s) {', '.join(missing)}"
            )
        result.append(CableDiagnosis(
            port=port,  # type: ignore[arg-type]
            speed=speed,  # type: ignore[arg-type]
            pairs=tuple(pairs[p] for p in _CABLE_PAIRS),  # type: ignore[arg-type]
        ))

    for line in _lines(text):
        cols = [c.strip() for c in line.split("|")]
        if len(cols) == 5 and cols[0] != "Port" and not _is_separator(cols[0]):
            if port is not None:
                flush()
            port = parse_uint(cols[0], "port number")
            speed = PortSpeed.parse(cols[1])
            pairs = {}
            pair = _parse_pair(cols[2], cols[3], cols[4])
            if pair is not None:
                pairs[pair.pair] = pair
        elif len(cols) == 3 and port is not None:
            pair = _parse_pair(cols[0], cols[1], cols[2])
            if pair is not None:
                pairs[pair.pair] = pair
        elif not line.strip() and port is not None:
            flush()
            port = None

    if port is not None:
        flush()
    return result


# ---------------------------------------------------------------------------
# Fixed-width tables
# ---------------------------------------------------------------------------

# Port State Status     Priority Class   Reason
# ---- ----- ---------- -------- ------- ------
_POE_DEBUG_COLUMNS = {
    "port": slice(0, 4),
    "status": slice(11, 21),
    "priority": slice(22, 30),
    "class": slice(31, 38),
    "reason": slice(39, None),
}
_POE_DEBUG_MIN_WIDTH = 39


def parse_poe_debug(text: str) -> list[PoEDebug]:
    """Parse ``debug ilpower port status``."""
    result: list[PoEDebug] = []
    for line in _lines(text):
        if len(line) < _POE_DEBUG_MIN_WIDTH:
            continue
        row = _slice_columns(line, _POE_DEBUG_COLUMNS)
        if not _UINT_RE.fullmatch(row["port"]):
            continue
        result.append(PoEDebug(
            port=int(row["port"]),
            status=PoEStatus.parse(row["status"]),
            priority=PoEPriority.parse(row["priority"]),
            poe_class=PoEClass.parse(row["class"]),
            reason=row["reason"],
        ))
    return result


_POE_CONFIG_KEYS: dict[str, tuple[str, Callable[[str], object]]] = {
    "Power management mode": ("management_mode", PoEMode.parse),
    "Pre-allocation": ("pre_allocation", lambda v: v == "Enabled"),
    "Power-up sequence": ("power_up_sequence", PoEPowerUpSequence.parse),
}

# Unit Power Status Nominal  Allocated       Consumed Available
#                   Power    Power           Power    Power
# ---- ----- ------ -------- --------------- -------- ---------
_POE_SUPPLY_COLUMNS = {
    "unit": slice(0, 4),
    "power": slice(5, 10),
    "status": slice(11, 17),
    "nominal": slice(18, 26),
    "allocated": slice(27, 42),
    "consumed": slice(43, 51),
    "available": slice(52, None),
}
_POE_SUPPLY_MIN_WIDTH = 52

# Port Power Limit (Admin) (mW) Power (mW) Voltage (mV) Current (mA)
# ---- ------------------------ ---------- ------------ ------------
_POE_PORT_COLUMNS = {
    "port": slice(0, 4),
    "limit": slice(5, 29),
    "power": slice(30, 40),
    "voltage": slice(41, 53),
    "current": slice(54, None),
}
_POE_PORT_MIN_WIDTH = 54


def _parse_watts(text: str, what: str) -> int:
    return parse_uint(text.replace("Watts", ""), what)


def _parse_poe_supply(line: str) -> PoESupply | None:
    if len(line) < _POE_SUPPLY_MIN_WIDTH:
        return None
    row = _slice_columns(line, _POE_SUPPLY_COLUMNS)
    if not _UINT_RE.fullmatch(row["unit"]):
        return None
    # Allocated power carries a trailing percentage, e.g. "60 Watts(16%)"
    allocated = row["allocated"].split(" ")[0]
    return PoESupply(
        unit=int(row["unit"]),
        power=row["power"],
        status=row["status"],
        nominal_power=_parse_watts(row["nominal"], "nominal power"),
        allocated_power=_parse_watts(allocated, "allocated power"),
        consumed_power=_parse_watts(row["consumed"], "consumed power"),
        available_power=_parse_watts(row["available"], "available power"),
    )


def _parse_poe_port(line: str) -> PoEPort | None:
    if len(line) < _POE_PORT_MIN_WIDTH:
        return None
    row = _slice_columns(line, _POE_PORT_COLUMNS)
    if not _UINT_RE.fullmatch(row["port"]):
        return None
    # "<limit> (<admin limit>)"
    limit, sep, admin_limit = row["limit"].partition("(")
    if not sep or not admin_limit.endswith(")"):
        raise MalformedDataError(f"Invalid PoE power limit: {row['limit']!r}")
    return PoEPort(
        port=int(row["port"]),
        power_limit=parse_uint(limit, "PoE power limit"),
        admin_power_limit=parse_uint(admin_limit[:-1], "PoE admin power limit"),
        power=parse_uint(row["power"], "PoE power"),
        voltage=parse_uint(row["voltage"], "PoE voltage"),
        current=parse_uint(row["current"], "PoE current"),
    )


def parse_poe_info(text: str) -> PoEInfo:
    """Parse ``show power inline consumption``.

    The output has three sections separated by blank lines: global
    settings (``key: value``), the power supply table and the per-port
    table. Anything after the third section is ignored.
    """
    config: dict[str, object] = {}
    supplies: list[PoESupply] = []
    ports: list[PoEPort] = []
    section = 0

    for line in _lines(text):
        if not line.strip():
            section += 1
            continue
        if section == 0:
            kv = _split_key_value(line, ":")
            if kv is None:
                continue
            key, value = kv
            if key not in _POE_CONFIG_KEYS:
                raise MalformedDataError(f"Unknown PoE setting: {key!r}")
            field_name, convert = _POE_CONFIG_KEYS[key]
            config[field_name] = convert(value)
        elif section == 1:
            supply = _parse_poe_supply(line)
            if supply is not None:
                supplies.append(supply)
        elif section == 2:
            port = _parse_poe_port(line)
            if port is not None:
                ports.append(port)

    return PoEInfo(
        config=_build(PoEConfig, config, "PoE configuration"),
        supplies=tuple(supplies),
        ports=tuple(ports),
    )


# ---------------------------------------------------------------------------
# Line and block regex parsers
# ---------------------------------------------------------------------------

_INTERFACE_STATUS_RE = re.compile(
    r"^(\d+)[ ]+(.*?)[ ]+(notconnect|connected)[ ]+(\d+)[ ]+([^ ]+)[ ]+([^ ]+)[ ]+(Copper|Fiber)$"
)


def parse_interface_status(text: str) -> list[InterfaceStatus]:
    """Parse ``show interfaces all status``.

    Only lines matching the full row pattern are data lines.
    """
    result: list[InterfaceStatus] = []
    for line in _lines(text):
        match = _INTERFACE_STATUS_RE.match(line)
        if match is None:
            continue
        port, name, state, vlan, duplex, speed, media = match.groups()
        result.append(InterfaceStatus(
            port=int(port),
            name=name,
            connected=state == "connected",
            vlan=int(vlan),
            duplex=PortDuplex.parse(duplex),
            speed=PortSpeed.parse(speed),
            media_type=MediaType.parse(media),
        ))
    return result


_INTERFACE_PREFIX = "GigabitEthernet"
_COUNTER_INDENT = " " * 5
_DETAIL_INDENT = " " * 2
_MEDIA_TYPE_PREFIX = "media type is "

# Applied in order to every counter line; None skips a capture that
# another pattern already records.
_COUNTER_PATTERNS: tuple[tuple[re.Pattern[str], tuple[str | None, ...]], ...] = (
    (re.compile(r"(\d+) packets input, (\d+) bytes, (\d+) throttles"),
     ("input_packets", "input_bytes", "input_throttles")),
    (re.compile(r"Received (\d+) broadcasts \((\d+) multicasts\)"),
     ("input_broadcasts", "input_multicasts")),
    (re.compile(r"(\d+) runts, (\d+) giants, (\d+) throttles"),
     ("input_runts", "input_giants", None)),
    (re.compile(r"(\d+) input errors, (\d+) CRC, (\d+) frame, (\d+) overrun, (\d+) ignored"),
     ("input_errors", "input_crc", "input_frame", "input_overrun", "input_ignored")),
    (re.compile(r"(\d+) multicast, (\d+) pause input"),
     (None, "input_pause")),
    (re.compile(r"(\d+) input packets with dribble condition detected"),
     ("input_dribble",)),
    (re.compile(r"(\d+) packets output, (\d+) bytes, (\d+) underrun"),
     ("output_packets", "output_bytes", "output_underrun")),
    (re.compile(r"(\d+) output errors, (\d+) collisions, (\d+) interface resets"),
     ("output_errors", "output_collisions", "output_interface_resets")),
    (re.compile(r"(\d+) babbles, (\d+) late collision, (\d+) deferred"),
     ("output_babbles", "output_late_collisions", "output_deferred")),
)
_PAUSE_OUTPUT_RE = re.compile(r"(\d+) PAUSE output")


def _parse_interface_header(line: str) -> dict[str, object]:
    """Parse ``GigabitEthernet<N> is <up|down>``."""
    words = line[len(_INTERFACE_PREFIX):].split(" ")
    if len(words) < 3:
        raise MalformedDataError(f"Invalid interface header: {line!r}")
    return {
        "port": parse_uint(words[0], "port number"),
        "up": words[2].rstrip(",") == "up",
    }


def _parse_media_line(line: str) -> dict[str, object]:
    """Parse ``<duplex>-duplex, <speed>-speed, media type is <type>``."""
    parts = line.split(", ")
    if len(parts) < 3:
        raise MalformedDataError(f"Invalid interface media line: {line!r}")
    media = parts[2].strip()
    if not media.startswith(_MEDIA_TYPE_PREFIX):
        raise MalformedDataError(f"Invalid interface media line: {line!r}")
    return {
        "duplex": PortDuplex.parse(parts[0].strip().replace("-duplex", "")),
        "speed": PortSpeed.parse(parts[1].strip().replace("-speed", "")),
        "media_type": MediaType.parse(media[len(_MEDIA_TYPE_PREFIX):]),
    }


def parse_interface_traffic(text: str) -> list[InterfaceTrafficStatus]:
    """Parse ``show interfaces <ports>``.

    Each interface is a block opened by a ``GigabitEthernet<N>`` line.
    Lines indented by two spaces carry duplex, speed, media type and
    flow control; lines indented by five carry counters. The block ends
    with the ``PAUSE output`` counter line.
    """
    result: list[InterfaceTrafficStatus] = []
    current: dict[str, object] | None = None

    for line in _lines(text):
        if line.startswith(_COUNTER_INDENT):
            if current is None:
                continue
            for pattern, names in _COUNTER_PATTERNS:
                match = pattern.search(line)
                if match is None:
                    continue
                for name, value in zip(names, match.groups()):
                    if name is not None:
                        current[name] = int(value)
            match = _PAUSE_OUTPUT_RE.search(line)
            if match is not None:
                current["output_paused"] = int(match.group(1))
                result.append(_build(
                    InterfaceTrafficStatus, current,
                    f"Interface {current['port']} statistics",
                ))
                current = None
        elif line.startswith(_DETAIL_INDENT):
            if current is None:
                continue
            if _MEDIA_TYPE_PREFIX in line:
                current.update(_parse_media_line(line))
            elif "flow-control is" in line:
                state = line.split("flow-control is", 1)[1]
                current["flow_control"] = "on" in state
        elif line.startswith(_INTERFACE_PREFIX):
            current = _parse_interface_header(line)

    return result


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def find_port(records: Sequence[_R], port: int) -> _R | None:
    """Return the first record for the given port number, if any."""
    for record in records:
        if record.port == port:  # type: ignore[attr-defined]
            return record
    return None


def find_mac_entry(entries: Sequence[MacEntry], mac: MacAddress) -> MacEntry | None:
    """Return the first table entry for the given address, if any."""
    for entry in entries:
        if entry.mac_address == mac:
            return entry
    return None
