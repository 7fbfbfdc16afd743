"""Exception types raised by the GS1900 client.

Every public operation either returns a fully populated result or raises
one of these. Nothing is retried internally.
"""

from __future__ import annotations


class GS1900Error(Exception):
    """Base class for all errors raised by this package."""


class ConnectivityError(GS1900Error):
    """The SSH or HTTP transport failed (connect, auth, read or write).

    The underlying exception is available as ``__cause__``.
    """


class ProtocolError(GS1900Error):
    """The device answered with something the protocol does not allow.

    Raised for an unexpected login banner, an unexpected trailing line
    after a read timeout, a failed HTTP login check or a missing session
    cookie.

    Attributes:
        raw: The offending device output, for diagnosis.
    """

    def __init__(self, message: str, raw: bytes | str = b"") -> None:
        super().__init__(message)
        self.raw = raw


class MalformedDataError(GS1900Error, ValueError):
    """A field matched the expected shape but failed a strict sub-parse."""


class PreconditionError(GS1900Error, ValueError):
    """A caller-supplied argument is out of bounds; no I/O was attempted."""
