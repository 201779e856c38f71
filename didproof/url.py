"""Destructure DID URLs into typed components.

A DID URL has the form
`did:<method>:<method-specific-id>[/<path>][?<query>][#<fragment>]`.

The low-level `parse_*` functions each consume a prefix of their input and
return a pair of the remaining input and the parsed value. They raise
`DidError` when the prefix does not match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from didproof.method import DidError, Method

_T = TypeVar("_T")

_PORT_TAG = "%3A"
_MAX_PORT = 65535


@dataclass
class QueryParams:
    """DID parameters carried in the query component of a DID URL."""

    service: str | None = None
    relative_ref: str | None = None
    version_id: str | None = None
    version_time: str | None = None
    hashlink: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Return the parameters as a JSON-ready dict, omitting unset ones."""
        pairs = {
            "service": self.service,
            "relativeRef": self.relative_ref,
            "versionId": self.version_id,
            "versionTime": self.version_time,
            "hl": self.hashlink,
        }
        return {key: value for key, value in pairs.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueryParams:
        """Build parameters from a dict; unknown keys are ignored."""
        relative_ref = data.get("relativeRef", data.get("relative-ref"))
        return cls(
            service=data.get("service"),
            relative_ref=relative_ref,
            version_id=data.get("versionId"),
            version_time=data.get("versionTime"),
            hashlink=data.get("hl"),
        )


@dataclass
class Url:
    """A parsed DID URL."""

    method: Method = Method.KEY
    id: str = ""
    path: list[str] | None = None
    query: QueryParams | None = None
    fragment: str | None = None

    @classmethod
    def parse(cls, s: str) -> Url:
        """Parse `s` into a DID URL, raising `DidError` if it is malformed."""
        try:
            _, url = parse_url(s)
        except DidError as err:
            raise DidError(f"failed to parse DID URL: {err}") from err
        return url

    def resource_id(self) -> str:
        """Return `did:<method>:<id>` plus `#<fragment>` when there is one."""
        rid = self.did()
        if self.fragment is not None:
            rid += f"#{self.fragment}"
        return rid

    def did(self) -> str:
        """Return the DID part of the URL: `did:<method>:<id>`."""
        return f"did:{self.method}:{self.id}"

    def __str__(self) -> str:
        out = self.did()
        if self.path is not None:
            out += "/" + "/".join(self.path)
        if self.query is not None:
            q = self.query
            parts = [
                f"{name}={value}"
                for name, value in (
                    ("service", q.service),
                    ("relativeRef", q.relative_ref),
                    ("versionId", q.version_id),
                    ("versionTime", q.version_time),
                    ("hl", q.hashlink),
                )
                if value is not None
            ]
            out += "?" + "&".join(parts)
        if self.fragment is not None:
            out += f"#{self.fragment}"
        return out


def _tag(s: str, prefix: str) -> str:
    if not s.startswith(prefix):
        raise DidError(f"expected {prefix!r} at {s!r}")
    return s[len(prefix):]


def _is_not(s: str, stop: str) -> tuple[str, str]:
    """Consume at least one character up to the first of `stop`."""
    end = next((i for i, ch in enumerate(s) if ch in stop), len(s))
    if end == 0:
        raise DidError(f"expected characters other than {stop!r} at {s!r}")
    return s[end:], s[:end]


def parse_scheme(s: str) -> tuple[str, str]:
    """Consume the `did:` scheme."""
    return _tag(_tag(s, "did"), ":"), "did"


def parse_method(s: str) -> tuple[str, Method]:
    """Consume `<method>:` and return the method."""
    name, sep, rest = s.partition(":")
    if not sep:
        raise DidError(f"no method separator in {s!r}")
    return rest, Method.parse(name)


def parse_id(s: str) -> tuple[str, str]:
    """Consume the method-specific identifier."""
    return _is_not(s, "%/?#")


def parse_port(s: str) -> tuple[str, int]:
    """Consume an encoded port, `%3A<port>`."""
    rest, text = _is_not(_tag(s, _PORT_TAG), "/?#")
    digits = text[1:] if text.startswith("+") else text
    if not digits.isascii() or not digits.isdigit() or int(digits) > _MAX_PORT:
        raise DidError(f"invalid port: {text}")
    return rest, int(digits)


def parse_path(s: str) -> tuple[str, list[str]]:
    """Consume `/<path>` and return its segments."""
    rest, text = _is_not(_tag(s, "/"), "?#")
    return rest, text.split("/")


def parse_query(s: str) -> tuple[str, QueryParams]:
    """Consume `?<query>` and return the recognised DID parameters."""
    rest, text = _is_not(_tag(s, "?"), "#")
    params = QueryParams()
    for param in text.split("&"):
        key, _, value = param.partition("=")
        if key == "service":
            params.service = value
        elif key in ("relativeRef", "relative-ref"):
            params.relative_ref = value
        elif key == "versionId":
            params.version_id = value
        elif key == "versionTime":
            params.version_time = value
        elif key == "hl":
            params.hashlink = value
    return rest, params


def parse_fragment(s: str) -> tuple[str, str]:
    """Consume `#<fragment>`; the fragment is the rest of the input."""
    return "", _tag(s, "#")


def _optional(parser: Callable[[str], tuple[str, _T]], s: str) -> tuple[str, _T | None]:
    try:
        return parser(s)
    except DidError:
        return s, None


def parse_url(s: str) -> tuple[str, Url]:
    """Parse a DID URL, returning any unconsumed input and the URL."""
    rest, _ = parse_scheme(s)
    rest, method = parse_method(rest)
    rest, ident = parse_id(rest)
    rest, port = _optional(parse_port, rest)
    rest, path = _optional(parse_path, rest)
    rest, query = _optional(parse_query, rest)
    rest, fragment = _optional(parse_fragment, rest)
    if port is not None:
        ident = f"{ident}{_PORT_TAG}{port}"
    return rest, Url(method=method, id=ident, path=path, query=query, fragment=fragment)