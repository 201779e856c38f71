import pytest

from didproof.method import DidError
from didproof.multikey import PublicKeyJwk
from didproof.verification import (
    JsonWebKey,
    KeyId,
    KeyPurpose,
    Multikey,
    VerificationMethod,
    VerificationMethodBuilder,
    key_format,
    key_format_from_dict,
)

MULTIKEY = "z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"
DID = "did:web:example.com"


def test_create():
    key = PublicKeyJwk.from_multibase(MULTIKEY)
    vm = VerificationMethod.build().key(key).key_id(KeyId.verification()).build(DID)
    assert vm.id == f"{DID}#{MULTIKEY}"
    assert vm.controller == DID
    assert vm.key == JsonWebKey(public_key_jwk=PublicKeyJwk.from_multibase(MULTIKEY))


def test_json_web_key():
    jwk = PublicKeyJwk.from_multibase(MULTIKEY)
    vm = VerificationMethod.build().key(jwk).key_id(KeyId.verification()).build(DID)
    assert vm.to_dict() == {
        "id": "did:web:example.com#z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu",
        "controller": "did:web:example.com",
        "type": "JsonWebKey",
        "publicKeyJwk": {
            "kty": "OKP",
            "crv": "Ed25519",
            "x": "Zmq-CJA17UpFeVmJ-nIKDuDEhUnoRSNIXFbxyBtCh6Y",
        },
    }


def test_multikey():
    vm = VerificationMethod.build().key(MULTIKEY).key_id(KeyId.verification()).build(DID)
    assert vm.to_dict() == {
        "id": "did:web:example.com#z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu",
        "controller": "did:web:example.com",
        "type": "Multikey",
        "publicKeyMultibase": "z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu",
    }


def test_default_key_id_is_did():
    vm = VerificationMethodBuilder().key(MULTIKEY).build(DID)
    assert vm.id == DID


def test_authorization_and_index_key_ids():
    auth = VerificationMethodBuilder().key(MULTIKEY).key_id(KeyId.authorization("zAuth")).build(DID)
    assert auth.id == f"{DID}#zAuth"
    indexed = VerificationMethodBuilder().key(MULTIKEY).key_id(KeyId.index("key-0")).build(DID)
    assert indexed.id == f"{DID}#key-0"


def test_build_without_key_fails():
    with pytest.raises(DidError, match="key must be set"):
        VerificationMethodBuilder().build(DID)


@pytest.mark.parametrize(
    ("key_id", "expected"),
    [
        (KeyId.did(), ""),
        (KeyId.verification(), ""),
        (KeyId.authorization("zAuth"), "#zAuth"),
        (KeyId.index("key-0"), "#key-0"),
    ],
)
def test_key_id_str(key_id, expected):
    assert str(key_id) == expected


def test_key_format_conversions():
    jwk = PublicKeyJwk.from_multibase(MULTIKEY)
    assert Multikey(MULTIKEY).jwk() == jwk
    assert JsonWebKey(jwk).multibase() == MULTIKEY
    assert Multikey(MULTIKEY).multibase() == MULTIKEY
    assert JsonWebKey(jwk).jwk() == jwk


def test_key_format_wrapping():
    assert key_format(MULTIKEY) == Multikey(MULTIKEY)
    jwk = PublicKeyJwk.from_multibase(MULTIKEY)
    assert key_format(jwk) == JsonWebKey(jwk)
    with pytest.raises(TypeError):
        key_format(42)


def test_key_format_from_dict_errors():
    with pytest.raises(DidError):
        key_format_from_dict({"type": "Other"})
    with pytest.raises(DidError):
        key_format_from_dict({"type": "Multikey"})


@pytest.mark.parametrize("key", [MULTIKEY, PublicKeyJwk.from_multibase(MULTIKEY)])
def test_round_trip(key):
    vm = VerificationMethodBuilder().key(key).key_id(KeyId.index("key-1")).build(DID)
    assert VerificationMethod.from_dict(vm.to_dict()) == vm


def test_context_serialised():
    vm = VerificationMethod(id=DID, controller=DID, key=Multikey(MULTIKEY), context="ctx")
    data = vm.to_dict()
    assert data["@context"] == "ctx"
    assert VerificationMethod.from_dict(data) == vm


def test_from_dict_missing_fields():
    with pytest.raises(DidError):
        VerificationMethod.from_dict({"type": "Multikey", "publicKeyMultibase": MULTIKEY})


def test_key_purpose_names():
    assert KeyPurpose("AssertionMethod") is KeyPurpose.ASSERTION_METHOD