"""Embedded data integrity proofs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from didproof.method import DidError

_T = TypeVar("_T")

_DATETIME = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})$"
)


def as_list(value: _T | list[_T]) -> list[_T]:
    """Return a one-or-many value as a list."""
    if isinstance(value, list):
        return list(value)
    return [value]


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat()
    return text.replace("+00:00", "Z")


def _parse_datetime(text: str) -> datetime:
    match = _DATETIME.match(text)
    if match is None:
        raise DidError(f"invalid RFC 3339 date-time: {text}")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6])))
    try:
        value = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tz
        )
    except ValueError as err:
        raise DidError(f"invalid RFC 3339 date-time: {text}") from err
    return value.astimezone(timezone.utc)


@dataclass
class Proof:
    """A data integrity proof, or a proof configuration without `proof_value`.

    `domain` and `previous_proof` hold a single string or a list of strings.
    """

    type_: str = ""
    proof_purpose: str = ""
    verification_method: str = ""
    id: str | None = None
    cryptosuite: str | None = None
    created: datetime | None = None
    expires: datetime | None = None
    domain: str | list[str] | None = None
    challenge: str | None = None
    proof_value: str | None = None
    previous_proof: str | list[str] | None = None
    nonce: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the proof as a JSON-ready dict, omitting unset optional members."""
        members: dict[str, Any] = {
            "id": self.id,
            "type": self.type_,
            "cryptosuite": self.cryptosuite,
            "proofPurpose": self.proof_purpose,
            "verificationMethod": self.verification_method,
            "created": _format_datetime(self.created) if self.created else None,
            "expires": _format_datetime(self.expires) if self.expires else None,
            "domain": self.domain,
            "challenge": self.challenge,
            "proofValue": self.proof_value,
            "previousProof": self.previous_proof,
            "nonce": self.nonce,
        }
        required = {"type", "proofPurpose", "verificationMethod"}
        return {k: v for k, v in members.items() if v is not None or k in required}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proof:
        """Read a proof from a dict; absent members take their defaults."""
        created = data.get("created")
        expires = data.get("expires")
        return cls(
            type_=data.get("type", ""),
            proof_purpose=data.get("proofPurpose", ""),
            verification_method=data.get("verificationMethod", ""),
            id=data.get("id"),
            cryptosuite=data.get("cryptosuite"),
            created=_parse_datetime(created) if created is not None else None,
            expires=_parse_datetime(expires) if expires is not None else None,
            domain=data.get("domain"),
            challenge=data.get("challenge"),
            proof_value=data.get("proofValue"),
            previous_proof=data.get("previousProof"),
            nonce=data.get("nonce"),
        )