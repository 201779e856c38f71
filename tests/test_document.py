from datetime import datetime, timezone

import pytest

from didproof.document import (
    CONTEXT,
    Document,
    DocumentBuilder,
    DocumentMetadata,
    DocumentMetadataBuilder,
)
from didproof.method import DidError
from didproof.multikey import PublicKeyJwk, derive_x25519_multikey
from didproof.service import Service
from didproof.verification import KeyId, Multikey, VerificationMethod

DID = "did:web:example.com"
MULTIKEY = "z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"


def _vm_builder(key_id=None):
    return VerificationMethod.build().key(MULTIKEY).key_id(key_id or KeyId.verification())


def _full_document():
    return (
        DocumentBuilder()
        .verification_method(_vm_builder())
        .assertion_method("key-0")
        .authentication(_vm_builder(KeyId.index("key-1")))
        .service(Service.build().id("svc").service_type("LinkedDomains").endpoint("https://example.com"))
        .add_controller(DID)
        .also_known_as("did:example:alias")
        .build(DID)
    )


def test_new_document_has_default_context_and_id():
    doc = DocumentBuilder().build(DID)
    assert doc.id == DID
    assert doc.context == list(CONTEXT)


def test_build_stamps_updated_time():
    before = datetime.now(timezone.utc)
    doc = DocumentBuilder().build(DID)
    assert doc.did_document_metadata.updated >= before


def test_verification_method_is_added_and_found():
    doc = DocumentBuilder().verification_method(_vm_builder()).build(DID)
    vm_id = f"{DID}#{MULTIKEY}"
    vm = doc.verification_method(vm_id)
    assert vm.id == vm_id
    assert vm.controller == DID
    assert vm.key == Multikey(MULTIKEY)


def test_relationship_reference_is_prefixed_with_did():
    doc = DocumentBuilder().assertion_method("key-0").capability_delegation("key-1").build(DID)
    assert doc.assertion_method == [f"{DID}#key-0"]
    assert doc.capability_delegation == [f"{DID}#key-1"]
    assert doc.authentication is None


def test_relationship_embedded_method():
    doc = DocumentBuilder().authentication(_vm_builder(KeyId.index("key-1"))).build(DID)
    assert doc.authentication[0].id == f"{DID}#key-1"


def test_relationship_rejects_other_types():
    with pytest.raises(TypeError):
        DocumentBuilder().assertion_method(42)


def test_services_are_built_and_found():
    doc = _full_document()
    svc = doc.service(f"{DID}#svc")
    assert svc.type_ == "LinkedDomains"
    assert svc.service_endpoint == "https://example.com"
    assert doc.service("svc") is None


def test_invalid_service_fails_build():
    builder = DocumentBuilder().service(Service.build().service_type("T").endpoint("e"))
    with pytest.raises(DidError, match="no id specified"):
        builder.build(DID)


def test_controllers_one_then_many():
    single = DocumentBuilder().add_controller("did:example:a").build(DID)
    assert single.controller == "did:example:a"
    many = DocumentBuilder().add_controller("did:example:a").add_controller("did:example:b").build(DID)
    assert many.controller == ["did:example:a", "did:example:b"]


def test_extra_context_is_appended():
    doc = DocumentBuilder().context({"@vocab": "https://example.com/#"}).build(DID)
    assert doc.context == list(CONTEXT) + [{"@vocab": "https://example.com/#"}]


def test_derive_key_agreement():
    doc = (
        DocumentBuilder()
        .verification_method(_vm_builder())
        .derive_key_agreement(True)
        .build(DID)
    )
    agreement = doc.key_agreement[0]
    assert agreement.id == DID
    assert agreement.key == Multikey(derive_x25519_multikey(MULTIKEY))
    assert agreement.key.jwk().crv == "X25519"


def test_derive_key_agreement_from_jwk_key():
    jwk = PublicKeyJwk.from_multibase(MULTIKEY)
    doc = (
        DocumentBuilder()
        .verification_method(VerificationMethod.build().key(jwk))
        .derive_key_agreement(True)
        .build(DID)
    )
    assert doc.key_agreement[0].key == Multikey(derive_x25519_multikey(MULTIKEY))


def test_derive_key_agreement_rejects_non_ed25519():
    x25519 = derive_x25519_multikey(MULTIKEY)
    builder = (
        DocumentBuilder()
        .verification_method(VerificationMethod.build().key(x25519))
        .derive_key_agreement(True)
    )
    with pytest.raises(DidError, match="not an Ed25519 key"):
        builder.build(DID)


def test_build_from_scratch_requires_did():
    with pytest.raises(DidError):
        DocumentBuilder().build()


def test_build_from_document():
    base = DocumentBuilder().verification_method(_vm_builder()).build(DID)
    updated = (
        DocumentBuilder.from_document(base)
        .verification_method(_vm_builder(KeyId.index("key-1")))
        .build()
    )
    assert updated.context == base.context
    assert updated.id == base.id
    assert [vm.id for vm in updated.verification_methods] == [f"{DID}#{MULTIKEY}", f"{DID}#key-1"]
    assert len(base.verification_methods) == 1


def test_build_from_document_takes_no_did():
    base = DocumentBuilder().build(DID)
    with pytest.raises(DidError):
        DocumentBuilder.from_document(base).build(DID)


def test_document_round_trip():
    doc = _full_document()
    assert Document.from_dict(doc.to_dict()) == doc


def test_document_dict_keys():
    data = _full_document().to_dict()
    assert data["@context"] == list(CONTEXT)
    assert data["verificationMethod"][0]["publicKeyMultibase"] == MULTIKEY
    assert data["alsoKnownAs"] == ["did:example:alias"]
    assert "keyAgreement" not in data


def test_document_from_dict_requires_id():
    with pytest.raises(DidError):
        Document.from_dict({"@context": list(CONTEXT)})


def test_metadata_builder():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    md = (
        DocumentMetadataBuilder()
        .created(created)
        .deactivated(True)
        .version_id("1")
        .equivalent_id(["did:example:a"])
        .additional("method", "web")
        .build()
    )
    assert md.created == created
    assert md.deactivated is True
    assert md.equivalent_id == ["did:example:a"]
    assert md.additional == {"method": "web"}


def test_metadata_default_created_is_epoch():
    assert DocumentMetadata().to_dict() == {"created": "1970-01-01T00:00:00Z"}


def test_metadata_round_trip_with_additional():
    md = DocumentMetadataBuilder().version_id("2").additional("extra", {"a": 1}).build()
    data = md.to_dict()
    assert data["extra"] == {"a": 1}
    assert DocumentMetadata.from_dict(data) == md


def test_metadata_from_metadata_copies():
    original = DocumentMetadataBuilder().version_id("1").build()
    changed = DocumentMetadataBuilder.from_metadata(original).version_id("2").build()
    assert original.version_id == "1"
    assert changed.version_id == "2"


def test_metadata_from_dict_requires_created():
    with pytest.raises(DidError):
        DocumentMetadata.from_dict({"versionId": "1"})


def test_builder_metadata_is_kept_with_updated_stamp():
    md = DocumentMetadataBuilder().version_id("7").build()
    doc = DocumentBuilder().metadata(md).build(DID)
    assert doc.did_document_metadata.version_id == "7"
    assert md.updated is None