"""Shared test fixtures for gs1900."""

import socket

import pytest


class ScriptedChannel:
    """Stand-in for a paramiko shell channel.

    recv() replays the script in order: bytes items are returned,
    exception instances are raised. Everything passed to sendall() is
    recorded in ``sent``.
    """

    def __init__(self, script):
        self.script = list(script)
        self.sent = []
        self.timeout = None
        self.closed = False

    def recv(self, nbytes):
        if not self.script:
            raise AssertionError("recv() called past the end of the script")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def send(self, data):
        raise AssertionError("send() may write part of the data; use sendall()")

    def sendall(self, data):
        self.sent.append(data)

    def settimeout(self, timeout):
        self.timeout = timeout

    def close(self):
        self.closed = True


TIMEOUT = socket.timeout("timed out")
PROMPT = "GS1900# "


@pytest.fixture
def channel_factory():
    """Return a callable building a ScriptedChannel from a script."""
    return ScriptedChannel


@pytest.fixture
def prompt():
    """Return the prompt the fake switch prints."""
    return PROMPT


@pytest.fixture
def read_timeout():
    """Return an exception instance signalling a read timeout."""
    return TIMEOUT
