"""GS1900 HTTP control plane.

Port and PoE settings are changed through the web UI's CGI endpoint,
which the SSH shell does not expose. Every control call logs in afresh:

    web = WebClient("192.0.2.10", "admin", "secret")
    web.control_port(5, "uplink", True, PortSpeed(auto=True, speed=0),
                     PortDuplex.AUTO, False)

The login hides the password in a 320-character string (see
obfuscate_password), then reads the session id from a JavaScript
``setCookie('XSSID', ...)`` call.
"""

from __future__ import annotations

import http.client
import logging
import random
import re
import string
import time
import urllib.error
import urllib.parse
import urllib.request

from gs1900.errors import ConnectivityError, PreconditionError, ProtocolError
from gs1900.types import (
    PoELimitMode,
    PoEPowerMode,
    PoEPriority,
    PortDuplex,
    PortSpeed,
)

logger = logging.getLogger(__name__)

DISPATCHER_PATH = "/cgi-bin/dispatcher.cgi"

OBFUSCATED_LENGTH = 320
ALPHABET = string.ascii_letters + string.digits
_TENS_POSITION = 122
_UNITS_POSITION = 288

LOGIN_OK = "\nOK\n"
_SESSION_RE = re.compile(r"setCookie\(.XSSID., .(.*?).\);")

POWER_LIMIT_MIN = 1000   # mW
POWER_LIMIT_MAX = 33000  # mW

CMD_PORT = "770"
CMD_POE = "775"
POE_TIME_RANGE = "20"

_POE_PRIORITY_CODES = {
    PoEPriority.CRITICAL: "0",
    PoEPriority.HIGH: "1",
    PoEPriority.MEDIUM: "2",
    PoEPriority.LOW: "3",
}

_POE_POWER_MODE_CODES = {
    PoEPowerMode.IEEE_802_3AF: "0",
    PoEPowerMode.LEGACY: "1",
    PoEPowerMode.PRE_802_3AT: "2",
    PoEPowerMode.IEEE_802_3AT: "3",
}

# The web UI accepts only "0" here, whatever mode is chosen.
_POE_LIMIT_MODE_CODES = {
    PoELimitMode.CLASSIFICATION: "0",
    PoELimitMode.USER: "0",
}

_DUPLEX_CODES = {
    PortDuplex.AUTO: "0",
    PortDuplex.FULL: "1",
    PortDuplex.HALF: "2",
}


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _speed_code(speed: PortSpeed) -> str:
    if speed.auto:
        return "0"
    if speed.speed >= 1000:
        return "3"
    if speed.speed >= 100:
        return "2"
    if speed.speed >= 10:
        return "1"
    return "0"


def obfuscate_password(password: str, rng: random.Random | None = None) -> str:
    """Encode a password the way the GS1900 login page does.

    The result is 320 characters long. Every 7th character (index
    ``x % 7 == 6``) carries the next character of the reversed password
    until it is used up. Index 122 holds the tens digit of the password
    length ("0" below 10) and index 288 the units digit. All other
    positions are random letters and digits.

    Args:
        password: Cleartext password.
        rng: Source of the filler characters (default: SystemRandom).

    Returns:
        The 320-character obfuscated password.
    """
    if rng is None:
        rng = random.SystemRandom()
    length = len(password)
    remaining = length - 1
    out = []
    for x in range(OBFUSCATED_LENGTH):
        if x % 7 == 6 and remaining >= 0:
            out.append(password[remaining])
            remaining -= 1
        elif x == _TENS_POSITION:
            out.append("0" if length < 10 else str(length // 10)[0])
        elif x == _UNITS_POSITION:
            out.append(str(length % 10))
        else:
            out.append(rng.choice(ALPHABET))
    return "".join(out)


class WebClient:
    """Client for the GS1900 web UI's dispatcher.cgi endpoint.

    Args:
        address: Switch host name or IP address.
        username: Web UI user.
        password: Web UI password (cleartext).
        timeout: HTTP timeout in seconds.
        login_delay: Seconds to wait between submitting the login and
            checking it. The switch rejects the check if asked sooner.
    """

    def __init__(
        self,
        address: str,
        username: str,
        password: str,
        *,
        timeout: float = 10.0,
        login_delay: float = 0.5,
    ) -> None:
        self.address = address
        self._username = username
        self._password = password
        self._timeout = timeout
        self._login_delay = login_delay

    @property
    def url(self) -> str:
        return f"http://{self.address}{DISPATCHER_PATH}"

    def _get(self, params: list[tuple[str, str]]) -> str:
        url = f"{self.url}?{urllib.parse.urlencode(params)}"
        try:
            req = urllib.request.Request(url)
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise ConnectivityError(f"HTTP request to {self.address} failed: {exc}") from exc
        return body.decode("utf-8", errors="replace")

    def login(self) -> str:
        """Log in to the web UI.

        Returns:
            The session id (XSSID).

        Raises:
            ConnectivityError: An HTTP request failed.
            ProtocolError: The login check did not answer OK, or no
                session id was found.
        """
        dummy = str(int(time.time()) * 1000)

        logger.debug("Logging in to %s as %s", self.address, self._username)
        self._get([
            ("login", "1"),
            ("username", self._username),
            ("password", obfuscate_password(self._password)),
            ("dummy", dummy),
        ])

        time.sleep(self._login_delay)

        body = self._get([("login_chk", "1"), ("dummy", dummy)])
        if body != LOGIN_OK:
            raise ProtocolError(f"HTTP login to {self.address} failed", raw=body)

        body = self._get([("cmd", "1")])
        match = _SESSION_RE.search(body)
        if match is None:
            raise ProtocolError(f"Session not found in response from {self.address}", raw=body)
        logger.debug("Logged in to %s", self.address)
        return match.group(1)

    def send_command(self, session: str, params: list[tuple[str, str]]) -> None:
        """POST a form to dispatcher.cgi.

        The session id is sent both as the XSSID cookie and as the last
        form field. The switch's reply lacks the blank line between
        headers and body, so it is not read: the command counts as done
        once the request has been sent.
        """
        body = urllib.parse.urlencode([*params, ("XSSID", session)])
        headers = {
            "Cookie": f"XSSID={session}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        logger.debug("POST %s cmd=%s", self.address, dict(params).get("cmd"))
        conn = http.client.HTTPConnection(self.address, timeout=self._timeout)
        try:
            conn.request("POST", DISPATCHER_PATH, body=body, headers=headers)
        except (http.client.HTTPException, OSError) as exc:
            raise ConnectivityError(f"HTTP POST to {self.address} failed: {exc}") from exc
        finally:
            conn.close()

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
        """Set a port's PoE configuration.

        Args:
            port: Port number.
            enabled: Whether PoE is delivered on the port.
            priority: Priority when the power budget runs out.
            power_mode: PoE standard.
            range_detection: Enable extended range detection.
            limit_mode: How the power limit is chosen.
            power_limit: Power limit in mW, 1000 to 33000.

        Raises:
            PreconditionError: power_limit is out of range. Nothing is
                sent to the switch.
        """
        if not POWER_LIMIT_MIN <= power_limit <= POWER_LIMIT_MAX:
            raise PreconditionError(
                f"PoE power limit must be {POWER_LIMIT_MIN}-{POWER_LIMIT_MAX} mW, "
                f"got {power_limit}"
            )
        session = self.login()
        self.send_command(session, [
            ("cmd", CMD_POE),
            ("portlist", str(port)),
            ("state", _flag(enabled)),
            ("portPriority", _POE_PRIORITY_CODES[priority]),
            ("portPowerMode", _POE_POWER_MODE_CODES[power_mode]),
            ("portRangeDetection", _flag(range_detection)),
            ("portLimitMode", _POE_LIMIT_MODE_CODES[limit_mode]),
            ("portPowerLimit", str(power_limit)),
            ("poeTimeRange", POE_TIME_RANGE),
            ("sysSubmit", "Apply"),
        ])

    def control_port(
        self,
        port: int,
        label: str,
        enabled: bool,
        speed: PortSpeed,
        duplex: PortDuplex,
        flow_control: bool,
    ) -> None:
        """Set a port's description, admin state, speed, duplex and flow control."""
        session = self.login()
        self.send_command(session, [
            ("cmd", CMD_PORT),
            ("portlist", str(port)),
            ("descp", label),
            ("state", _flag(enabled)),
            ("speed", _speed_code(speed)),
            ("duplex", _DUPLEX_CODES[duplex]),
            ("fc", _flag(flow_control)),
            ("sysSubmit", "Apply"),
        ])
