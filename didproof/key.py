"""The `did:key` method: a DID that is a static public key."""

from __future__ import annotations

from didproof.method import DidError, Method
from didproof.url import Url
from didproof.verification import Multikey, VerificationMethod


def resolve(url: Url) -> VerificationMethod:
    """Turn a `did:key` URL into the verification method its fragment encodes."""
    if url.method is not Method.KEY:
        raise DidError(f"DID is not a valid did:key: {url}")
    if url.fragment is None:
        raise DidError("DID is not a valid did:key - there is no fragment")
    return VerificationMethod(
        id=url.resource_id(),
        controller=url.did(),
        key=Multikey(public_key_multibase=url.fragment),
    )