"""GS1900 terminal protocol: response collection and output cleanup.

The switch's CLI has no framing. A response is complete when no more
bytes arrive within the read deadline and the last line is the prompt
captured at login. Long output stops at a ``--More--`` marker until a
space is sent. Between pages the switch emits a cursor-up/clear-line
sequence, which normalize_output() removes together with the prompt and
the markers.
"""

from __future__ import annotations

import logging
import socket
from typing import Protocol

from gs1900.errors import ConnectivityError, ProtocolError

logger = logging.getLogger(__name__)

# ESC [ H (cursor home), ESC [ J (clear screen), NUL
LOGIN_BANNER = b"\x1b[H\x1b[J\x00"
PROMPT_MAX_BYTES = 32

PAGINATION_MARKER = "--More--"
CONTINUE_KEY = b" "

# Literal substrings deleted from every response.
PAGE_ARTIFACTS = (
    PAGINATION_MARKER + "\n",
    PAGINATION_MARKER + "\x08\n",
    "\x1b[A\x1b[2K",  # cursor up, clear line
)

DEFAULT_READ_TIMEOUT = 1.0
READ_CHUNK_SIZE = 1024


class ShellChannel(Protocol):
    """The subset of paramiko.Channel the collector relies on."""

    def recv(self, nbytes: int) -> bytes: ...

    def sendall(self, data: bytes) -> None: ...

    def settimeout(self, timeout: float | None) -> None: ...


def normalize_output(text: str, prompt: str) -> str:
    """Strip the prompt and pagination artifacts from a response.

    Only exact literal substrings are deleted, so the column layout of
    the remaining lines is untouched. Deleting one artifact can join the
    text around it into another, so passes repeat until nothing changes.
    """
    while True:
        cleaned = text.replace(prompt, "") if prompt else text
        for artifact in PAGE_ARTIFACTS:
            cleaned = cleaned.replace(artifact, "")
        if cleaned == text:
            return text
        text = cleaned


def _last_line(text: str) -> str:
    return text.split("\n")[-1].strip()


class ResponseCollector:
    """Read one command response from the shell, paging as needed.

    Args:
        channel: Interactive shell channel.
        prompt: Prompt string captured at login.
        read_timeout: Seconds of silence taken as end of output.
    """

    def __init__(
        self,
        channel: ShellChannel,
        prompt: str,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
    ) -> None:
        self._channel = channel
        self._prompt = prompt.strip()
        self._read_timeout = read_timeout

    def collect(self) -> str:
        """Read until the prompt follows a read timeout.

        Returns:
            The raw response text, prompt and page markers included.

        Raises:
            ProtocolError: The output stopped on a line that is neither
                the prompt nor the pagination marker.
            ConnectivityError: The channel failed or was closed.
        """
        self._channel.settimeout(self._read_timeout)
        buffer = bytearray()
        pages = 1

        while True:
            try:
                chunk = self._channel.recv(READ_CHUNK_SIZE)
            except socket.timeout:
                text = buffer.decode("utf-8", errors="replace")
                last = _last_line(text)
                if last == self._prompt:
                    logger.debug("Response complete: %d bytes, %d page(s)", len(buffer), pages)
                    return text
                if last == PAGINATION_MARKER:
                    pages += 1
                    logger.debug("Requesting page %d", pages)
                    self._send(CONTINUE_KEY)
                    continue
                logger.debug("Unexpected trailing line %r, raw data: %r", last, bytes(buffer))
                raise ProtocolError(
                    f"Unexpected trailing line in response: {last!r}",
                    raw=bytes(buffer),
                ) from None
            except OSError as exc:
                raise ConnectivityError(f"Failed to read from shell: {exc}") from exc

            if not chunk:
                raise ConnectivityError("Shell channel closed by the device")
            buffer += chunk

    def _send(self, data: bytes) -> None:
        try:
            self._channel.sendall(data)
        except OSError as exc:
            raise ConnectivityError(f"Failed to write to shell: {exc}") from exc
