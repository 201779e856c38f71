"""Multibase and multicodec key encodings, and Ed25519 public-key helpers.

Keys travel as multibase strings (base58btc, `z` prefix) wrapping a
multicodec-tagged public key, or as OKP JSON Web Keys.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from didproof.method import DidError

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
BASE58BTC_PREFIX = "z"

ED25519_CODEC = bytes([0xED, 0x01])
X25519_CODEC = bytes([0xEC, 0x01])

KEY_LENGTH = 32

_CODEC_CURVES = {ED25519_CODEC: "Ed25519", X25519_CODEC: "X25519"}
_CURVE_CODECS = {curve: codec for codec, curve in _CODEC_CURVES.items()}

_BASE58_INDEX = {ch: i for i, ch in enumerate(BASE58_ALPHABET)}

# Curve25519 field and Edwards curve constants.
_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P
_SQRT_M1 = pow(2, (_P - 1) // 4, _P)


def base58_encode(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    zeros = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, rem = divmod(number, 58)
        digits.append(BASE58_ALPHABET[rem])
    return "1" * zeros + "".join(reversed(digits))


def base58_decode(text: str) -> bytes:
    """Decode a Bitcoin base58 string, raising `DidError` on bad characters."""
    zeros = len(text) - len(text.lstrip("1"))
    number = 0
    for ch in text:
        try:
            number = number * 58 + _BASE58_INDEX[ch]
        except KeyError:
            raise DidError(f"invalid base58 character: {ch!r}") from None
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * zeros + body


def multibase_encode(data: bytes) -> str:
    """Encode bytes as a base58btc multibase string."""
    return BASE58BTC_PREFIX + base58_encode(data)


def multibase_decode(text: str) -> bytes:
    """Decode a base58btc multibase string."""
    if not text:
        raise DidError("failed to decode multibase key: empty input")
    if not text.startswith(BASE58BTC_PREFIX):
        raise DidError("multibase base is not Base58Btc")
    return base58_decode(text[len(BASE58BTC_PREFIX):])


def _recover_x(y: int, sign: int) -> int:
    """Recover the Edwards x coordinate for `y`, or raise if not on the curve."""
    u = (y * y - 1) % _P
    v = (_D * y * y + 1) % _P
    x = (u * pow(v, 3, _P) * pow(u * pow(v, 7, _P), (_P - 5) // 8, _P)) % _P
    vxx = (v * x * x) % _P
    if vxx == u:
        pass
    elif vxx == (-u) % _P:
        x = (x * _SQRT_M1) % _P
    else:
        raise DidError("public key is not a valid Ed25519 point")
    if x == 0 and sign:
        raise DidError("public key is not a valid Ed25519 point")
    if x & 1 != sign:
        x = _P - x
    return x


def ed25519_to_x25519(public_key: bytes) -> bytes:
    """Map an Ed25519 public key to its X25519 (Montgomery) counterpart."""
    if len(public_key) != KEY_LENGTH:
        raise DidError(f"Ed25519 public key must be {KEY_LENGTH} bytes")
    encoded = int.from_bytes(public_key, "little")
    sign = encoded >> 255
    y = encoded & ((1 << 255) - 1)
    if y >= _P:
        raise DidError("public key is not a valid Ed25519 point")
    _recover_x(y, sign)
    u = ((1 + y) * pow((1 - y) % _P, _P - 2, _P)) % _P
    return u.to_bytes(KEY_LENGTH, "little")


def _split_codec(multi_bytes: bytes) -> tuple[bytes, bytes]:
    codec, key = multi_bytes[: len(ED25519_CODEC)], multi_bytes[len(ED25519_CODEC):]
    return codec, key


def derive_x25519_multikey(ed25519_multikey: str) -> str:
    """Derive an X25519 multikey from an Ed25519 multikey."""
    codec, key = _split_codec(multibase_decode(ed25519_multikey))
    if codec != ED25519_CODEC:
        raise DidError("key is not an Ed25519 key")
    return multibase_encode(X25519_CODEC + ed25519_to_x25519(key))


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except ValueError as err:
        raise DidError(f"invalid base64url value: {err}") from err


@dataclass
class PublicKeyJwk:
    """An octet key pair public key in JSON Web Key form."""

    kty: str = "OKP"
    crv: str = "Ed25519"
    x: str = ""
    y: str | None = None
    kid: str | None = None
    alg: str | None = None
    use: str | None = None

    @classmethod
    def from_bytes(cls, data: bytes) -> PublicKeyJwk:
        """Build an Ed25519 JWK from raw public key bytes."""
        if len(data) != KEY_LENGTH:
            raise DidError(f"Ed25519 public key must be {KEY_LENGTH} bytes")
        return cls(kty="OKP", crv="Ed25519", x=_b64url_encode(data))

    @classmethod
    def from_multibase(cls, multibase: str) -> PublicKeyJwk:
        """Build a JWK from an Ed25519 or X25519 multikey."""
        codec, key = _split_codec(multibase_decode(multibase))
        curve = _CODEC_CURVES.get(codec)
        if curve is None:
            raise DidError("unsupported multicodec key type")
        if len(key) != KEY_LENGTH:
            raise DidError(f"{curve} public key must be {KEY_LENGTH} bytes")
        return cls(kty="OKP", crv=curve, x=_b64url_encode(key))

    def to_multibase(self) -> str:
        """Encode the key as a multikey string."""
        codec = _CURVE_CODECS.get(self.crv)
        if self.kty != "OKP" or codec is None:
            raise DidError(f"unsupported key for multibase encoding: {self.kty}/{self.crv}")
        key = _b64url_decode(self.x)
        if len(key) != KEY_LENGTH:
            raise DidError(f"{self.crv} public key must be {KEY_LENGTH} bytes")
        return multibase_encode(codec + key)

    def to_dict(self) -> dict[str, str]:
        """Return the JWK as a JSON-ready dict, omitting unset members."""
        members = {
            "kid": self.kid,
            "kty": self.kty,
            "crv": self.crv,
            "x": self.x,
            "y": self.y,
            "alg": self.alg,
            "use": self.use,
        }
        return {key: value for key, value in members.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PublicKeyJwk:
        """Build a JWK from a dict, raising `DidError` if members are missing."""
        missing = [name for name in ("kty", "crv", "x") if name not in data]
        if missing:
            raise DidError(f"JWK is missing members: {', '.join(missing)}")
        return cls(
            kty=data["kty"],
            crv=data["crv"],
            x=data["x"],
            y=data.get("y"),
            kid=data.get("kid"),
            alg=data.get("alg"),
            use=data.get("use"),
        )