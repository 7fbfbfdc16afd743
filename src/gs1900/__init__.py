"""GS1900: read status from and configure Zyxel GS1900 switches.

Status is read by driving the switch's CLI over an SSH shell and
parsing the text it prints. Port and PoE settings are changed through
the web UI's CGI endpoint, which the CLI does not expose.

Quick start:
    from gs1900 import GS1900Client

    with GS1900Client.open("192.0.2.10", "admin", "secret") as switch:
        for port in switch.interface_status_info():
            print(f"{port.port} {port.name} connected={port.connected}")
"""

from gs1900.client import GS1900Client
from gs1900.config import Config, DeviceConfig, SessionConfig, WebConfig, load_config
from gs1900.errors import (
    ConnectivityError,
    GS1900Error,
    MalformedDataError,
    PreconditionError,
    ProtocolError,
)
from gs1900.protocol import ResponseCollector, normalize_output
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
    PoELimitMode,
    PoEMode,
    PoEPort,
    PoEPowerMode,
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
from gs1900.web import WebClient, obfuscate_password

__all__ = [
    "BasicInfo",
    "CableDiagnosis",
    "CablePairState",
    "CablePairStatus",
    "Config",
    "ConnectivityError",
    "DeviceConfig",
    "FiberInfo",
    "GS1900Client",
    "GS1900Error",
    "IPv4Address",
    "InterfaceStatus",
    "InterfaceTrafficStatus",
    "LLDPCapability",
    "LLDPNeighbor",
    "MacAddress",
    "MacEntry",
    "MacEntryType",
    "MalformedDataError",
    "MediaType",
    "PoEClass",
    "PoEConfig",
    "PoEDebug",
    "PoEInfo",
    "PoELimitMode",
    "PoEMode",
    "PoEPort",
    "PoEPowerMode",
    "PoEPowerUpSequence",
    "PoEPriority",
    "PoEStatus",
    "PoESupply",
    "PortDuplex",
    "PortSpeed",
    "PreconditionError",
    "ProtocolError",
    "ResponseCollector",
    "SFPStatus",
    "SessionConfig",
    "VLANInfo",
    "VLANType",
    "WebClient",
    "WebConfig",
    "load_config",
    "normalize_output",
    "obfuscate_password",
]
