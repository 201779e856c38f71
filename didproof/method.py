"""DID methods supported by the package and the package's base error."""

from __future__ import annotations

from enum import Enum


class DidError(Exception):
    """Raised when a DID, DID URL or DID document operation fails."""


class Method(Enum):
    """A DID method: the second segment of `did:<method>:<id>`."""

    KEY = "key"
    WEB = "web"
    WEBVH = "webvh"

    @classmethod
    def parse(cls, s: str) -> Method:
        """Return the method named by `s`, or raise `DidError`."""
        for member in cls:
            if member.value == s:
                return member
        raise DidError(f"method not supported: {s}")

    def __str__(self) -> str:
        return self.value