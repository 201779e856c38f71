"""Verification methods: public key material expressed in a DID document."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

from didproof.method import DidError
from didproof.multikey import PublicKeyJwk


@dataclass
class Multikey:
    """Key material encoded as a multibase string."""

    public_key_multibase: str = ""

    def jwk(self) -> PublicKeyJwk:
        """Return the key as a JWK, decoding the multibase value."""
        return PublicKeyJwk.from_multibase(self.public_key_multibase)

    def multibase(self) -> str:
        """Return the key as a multibase string."""
        return self.public_key_multibase

    def to_dict(self) -> dict[str, Any]:
        """Return the key's JSON members, tagged with its type."""
        return {"type": "Multikey", "publicKeyMultibase": self.public_key_multibase}


@dataclass
class JsonWebKey:
    """Key material encoded as a JSON Web Key."""

    public_key_jwk: PublicKeyJwk = field(default_factory=PublicKeyJwk)

    def jwk(self) -> PublicKeyJwk:
        """Return a copy of the JWK."""
        return replace(self.public_key_jwk)

    def multibase(self) -> str:
        """Return the key encoded as a multibase string."""
        return self.public_key_jwk.to_multibase()

    def to_dict(self) -> dict[str, Any]:
        """Return the key's JSON members, tagged with its type."""
        return {"type": "JsonWebKey", "publicKeyJwk": self.public_key_jwk.to_dict()}


KeyFormat = Union[Multikey, JsonWebKey]


def key_format(key: KeyFormat | PublicKeyJwk | str) -> KeyFormat:
    """Wrap a JWK or multibase string as a key format."""
    if isinstance(key, (Multikey, JsonWebKey)):
        return key
    if isinstance(key, PublicKeyJwk):
        return JsonWebKey(public_key_jwk=key)
    if isinstance(key, str):
        return Multikey(public_key_multibase=key)
    raise TypeError(f"unsupported key type: {type(key).__name__}")


def key_format_from_dict(data: dict[str, Any]) -> KeyFormat:
    """Read a key format from JSON members tagged by `type`."""
    kind = data.get("type")
    if kind == "Multikey":
        if "publicKeyMultibase" not in data:
            raise DidError("Multikey is missing publicKeyMultibase")
        return Multikey(public_key_multibase=data["publicKeyMultibase"])
    if kind == "JsonWebKey":
        if "publicKeyJwk" not in data:
            raise DidError("JsonWebKey is missing publicKeyJwk")
        return JsonWebKey(public_key_jwk=PublicKeyJwk.from_dict(data["publicKeyJwk"]))
    raise DidError(f"unknown verification method type: {kind}")


@dataclass
class VerificationMethod:
    """Public key material used to authenticate or authorise the DID subject."""

    id: str = ""
    controller: str = ""
    key: KeyFormat = field(default_factory=Multikey)
    context: Any = None

    @classmethod
    def build(cls) -> VerificationMethodBuilder:
        """Start building a verification method."""
        return VerificationMethodBuilder()

    def to_dict(self) -> dict[str, Any]:
        """Return the verification method as a JSON-ready dict."""
        out: dict[str, Any] = {}
        if self.context is not None:
            out["@context"] = self.context
        out["id"] = self.id
        out["controller"] = self.controller
        out.update(self.key.to_dict())
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VerificationMethod:
        """Read a verification method from a dict."""
        missing = [name for name in ("id", "controller") if name not in data]
        if missing:
            raise DidError(f"verification method is missing: {', '.join(missing)}")
        return cls(
            id=data["id"],
            controller=data["controller"],
            key=key_format_from_dict(data),
            context=data.get("@context"),
        )


class KeyIdKind(Enum):
    """How a verification method's ID is formed."""

    DID = "did"
    AUTHORIZATION = "authorization"
    VERIFICATION = "verification"
    INDEX = "index"


@dataclass(frozen=True)
class KeyId:
    """Instruction on how to construct a verification method's ID."""

    kind: KeyIdKind = KeyIdKind.DID
    value: str | None = None

    @classmethod
    def did(cls) -> KeyId:
        """Use the DID itself, with no fragment."""
        return cls(KeyIdKind.DID)

    @classmethod
    def authorization(cls, key: str) -> KeyId:
        """Append the given multibase authorization key as the fragment."""
        return cls(KeyIdKind.AUTHORIZATION, key)

    @classmethod
    def verification(cls) -> KeyId:
        """Append the method's own key, multibase encoded, as the fragment."""
        return cls(KeyIdKind.VERIFICATION)

    @classmethod
    def index(cls, index: str) -> KeyId:
        """Append the given prefixed index as the fragment."""
        return cls(KeyIdKind.INDEX, index)

    def __str__(self) -> str:
        if self.kind in (KeyIdKind.AUTHORIZATION, KeyIdKind.INDEX):
            return f"#{self.value}"
        return ""


class KeyPurpose(Enum):
    """The document relationship that key material is used for."""

    VERIFICATION_METHOD = "VerificationMethod"
    AUTHENTICATION = "Authentication"
    ASSERTION_METHOD = "AssertionMethod"
    KEY_AGREEMENT = "KeyAgreement"
    CAPABILITY_INVOCATION = "CapabilityInvocation"
    CAPABILITY_DELEGATION = "CapabilityDelegation"


class VerificationMethodBuilder:
    """Builds a verification method for a given DID."""

    def __init__(self) -> None:
        self._key: KeyFormat | None = None
        self._key_id = KeyId.did()

    def key(self, key: KeyFormat | PublicKeyJwk | str) -> VerificationMethodBuilder:
        """Set the key: a JWK, a multibase string or a key format."""
        self._key = key_format(key)
        return self

    def key_id(self, key_id: KeyId) -> VerificationMethodBuilder:
        """Set how the method's ID is constructed."""
        self._key_id = key_id
        return self

    def build(self, did: str) -> VerificationMethod:
        """Build the verification method controlled by `did`."""
        if self._key is None:
            raise DidError("Verification method key must be set")
        kind = self._key_id.kind
        if kind is KeyIdKind.VERIFICATION:
            suffix = f"#{self._key.multibase()}"
        elif kind is KeyIdKind.DID:
            suffix = ""
        else:
            suffix = f"#{self._key_id.value}"
        return VerificationMethod(id=f"{did}{suffix}", controller=did, key=self._key)