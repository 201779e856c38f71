"""DID documents, their metadata, and a builder for assembling them."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Union

from didproof.method import DidError
from didproof.multikey import derive_x25519_multikey
from didproof.proof import _format_datetime, _parse_datetime
from didproof.service import Service, ServiceBuilder
from didproof.verification import VerificationMethod, VerificationMethodBuilder

CONTEXT = ("https://www.w3.org/ns/did/v1", "https://www.w3.org/ns/cid/v1")
"""Contexts added to a document built from scratch."""

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

Relationship = Union[str, VerificationMethod]
"""A relationship entry: a reference to a method or an embedded method."""

_METADATA_KEYS = (
    "created",
    "updated",
    "deactivated",
    "nextUpdate",
    "versionId",
    "nextVersionId",
    "equivalentId",
    "canonicalId",
)

_RELATIONSHIPS = (
    ("authentication", "authentication"),
    ("assertion_method", "assertionMethod"),
    ("key_agreement", "keyAgreement"),
    ("capability_invocation", "capabilityInvocation"),
    ("capability_delegation", "capabilityDelegation"),
)


@dataclass
class DocumentMetadata:
    """Metadata about a DID document; changes only when the document does."""

    created: datetime = _EPOCH
    updated: datetime | None = None
    deactivated: bool | None = None
    next_update: datetime | None = None
    version_id: str | None = None
    next_version_id: str | None = None
    equivalent_id: list[str] | None = None
    canonical_id: str | None = None
    additional: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the metadata as a JSON-ready dict; additional fields are inlined."""
        members: dict[str, Any] = {
            "created": _format_datetime(self.created),
            "updated": _format_datetime(self.updated) if self.updated else None,
            "deactivated": self.deactivated,
            "nextUpdate": _format_datetime(self.next_update) if self.next_update else None,
            "versionId": self.version_id,
            "nextVersionId": self.next_version_id,
            "equivalentId": list(self.equivalent_id) if self.equivalent_id is not None else None,
            "canonicalId": self.canonical_id,
        }
        out = {key: value for key, value in members.items() if value is not None}
        if self.additional:
            out.update(self.additional)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentMetadata:
        """Read metadata from a dict; unknown members become additional fields."""
        if "created" not in data:
            raise DidError("document metadata is missing: created")

        def when(key: str) -> datetime | None:
            value = data.get(key)
            return _parse_datetime(value) if value is not None else None

        equivalent = data.get("equivalentId")
        additional = {k: v for k, v in data.items() if k not in _METADATA_KEYS}
        return cls(
            created=_parse_datetime(data["created"]),
            updated=when("updated"),
            deactivated=data.get("deactivated"),
            next_update=when("nextUpdate"),
            version_id=data.get("versionId"),
            next_version_id=data.get("nextVersionId"),
            equivalent_id=list(equivalent) if equivalent is not None else None,
            canonical_id=data.get("canonicalId"),
            additional=additional or None,
        )


class DocumentMetadataBuilder:
    """Builds document metadata."""

    def __init__(self) -> None:
        self._md = DocumentMetadata()

    @classmethod
    def from_metadata(cls, metadata: DocumentMetadata) -> DocumentMetadataBuilder:
        """Start from a copy of existing metadata."""
        builder = cls()
        builder._md = copy.deepcopy(metadata)
        return builder

    def created(self, created: datetime) -> DocumentMetadataBuilder:
        """Set the created timestamp."""
        self._md.created = created
        return self

    def updated(self, updated: datetime) -> DocumentMetadataBuilder:
        """Set the updated timestamp."""
        self._md.updated = updated
        return self

    def deactivated(self, deactivated: bool) -> DocumentMetadataBuilder:
        """Set the deactivated flag."""
        self._md.deactivated = deactivated
        return self

    def next_update(self, next_update: datetime) -> DocumentMetadataBuilder:
        """Set the next update timestamp."""
        self._md.next_update = next_update
        return self

    def version_id(self, version_id: str) -> DocumentMetadataBuilder:
        """Set the version ID."""
        self._md.version_id = version_id
        return self

    def next_version_id(self, next_version_id: str) -> DocumentMetadataBuilder:
        """Set the next version ID."""
        self._md.next_version_id = next_version_id
        return self

    def equivalent_id(self, equivalent_id: Iterable[str]) -> DocumentMetadataBuilder:
        """Set the equivalent IDs."""
        self._md.equivalent_id = list(equivalent_id)
        return self

    def canonical_id(self, canonical_id: str) -> DocumentMetadataBuilder:
        """Set the canonical ID."""
        self._md.canonical_id = canonical_id
        return self

    def additional(self, key: str, value: Any) -> DocumentMetadataBuilder:
        """Set an additional, method-specific field."""
        if self._md.additional is None:
            self._md.additional = {}
        self._md.additional[key] = value
        return self

    def build(self) -> DocumentMetadata:
        """Return the metadata."""
        return copy.deepcopy(self._md)


def _relationship_to_dict(entries: list[Relationship]) -> list[Any]:
    return [e if isinstance(e, str) else e.to_dict() for e in entries]


def _relationship_from_dict(entries: list[Any]) -> list[Relationship]:
    out: list[Relationship] = []
    for entry in entries:
        if isinstance(entry, str):
            out.append(entry)
        elif isinstance(entry, dict):
            out.append(VerificationMethod.from_dict(entry))
        else:
            raise DidError(f"invalid verification relationship entry: {entry!r}")
    return out


@dataclass
class Document:
    """A DID document: information related to a DID."""

    id: str = ""
    context: list[Any] = field(default_factory=list)
    also_known_as: list[str] | None = None
    controller: str | list[str] | None = None
    services: list[Service] | None = None
    verification_methods: list[VerificationMethod] | None = None
    authentication: list[Relationship] | None = None
    assertion_method: list[Relationship] | None = None
    key_agreement: list[Relationship] | None = None
    capability_invocation: list[Relationship] | None = None
    capability_delegation: list[Relationship] | None = None
    did_document_metadata: DocumentMetadata | None = None

    def service(self, id: str) -> Service | None:
        """Return the service with the given ID, if any."""
        return next((s for s in self.services or () if s.id == id), None)

    def verification_method(self, id: str) -> VerificationMethod | None:
        """Return the verification method with the given ID, if any."""
        return next((vm for vm in self.verification_methods or () if vm.id == id), None)

    def to_dict(self) -> dict[str, Any]:
        """Return the document as a JSON-ready dict, omitting unset members."""
        out: dict[str, Any] = {"@context": list(self.context), "id": self.id}
        if self.also_known_as is not None:
            out["alsoKnownAs"] = list(self.also_known_as)
        if self.controller is not None:
            controller = self.controller
            out["controller"] = controller if isinstance(controller, str) else list(controller)
        if self.services is not None:
            out["service"] = [s.to_dict() for s in self.services]
        if self.verification_methods is not None:
            out["verificationMethod"] = [vm.to_dict() for vm in self.verification_methods]
        for attr, key in _RELATIONSHIPS:
            entries = getattr(self, attr)
            if entries is not None:
                out[key] = _relationship_to_dict(entries)
        if self.did_document_metadata is not None:
            out["didDocumentMetadata"] = self.did_document_metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Document:
        """Read a document from a dict."""
        missing = [name for name in ("@context", "id") if name not in data]
        if missing:
            raise DidError(f"document is missing: {', '.join(missing)}")
        doc = cls(id=data["id"], context=list(data["@context"]))
        if "alsoKnownAs" in data:
            doc.also_known_as = list(data["alsoKnownAs"])
        if "controller" in data:
            controller = data["controller"]
            doc.controller = controller if isinstance(controller, str) else list(controller)
        if "service" in data:
            doc.services = [Service.from_dict(s) for s in data["service"]]
        if "verificationMethod" in data:
            doc.verification_methods = [
                VerificationMethod.from_dict(vm) for vm in data["verificationMethod"]
            ]
        for attr, key in _RELATIONSHIPS:
            if key in data:
                setattr(doc, attr, _relationship_from_dict(data[key]))
        if "didDocumentMetadata" in data:
            doc.did_document_metadata = DocumentMetadata.from_dict(data["didDocumentMetadata"])
        return doc


RelationshipInput = Union[str, VerificationMethodBuilder]


def _check_relationship(entry: Any) -> RelationshipInput:
    if not isinstance(entry, (str, VerificationMethodBuilder)):
        raise TypeError(f"expected a key ID or verification method builder, got {type(entry).__name__}")
    return entry


def _build_relationship(
    did: str, entries: list[RelationshipInput] | None
) -> list[Relationship] | None:
    if entries is None:
        return None
    return [f"{did}#{e}" if isinstance(e, str) else e.build(did) for e in entries]


def _x25519_key_agreement(did: str, ed25519_multikey: str) -> VerificationMethod:
    multikey = derive_x25519_multikey(ed25519_multikey)
    return VerificationMethod.build().key(multikey).build(did)


class DocumentBuilder:
    """Builds a DID document from scratch or from an existing document."""

    def __init__(self) -> None:
        self._document: Document | None = None
        self._context: list[Any] | None = list(CONTEXT)
        self._authentication: list[RelationshipInput] | None = None
        self._assertion_method: list[RelationshipInput] | None = None
        self._key_agreement: list[RelationshipInput] | None = None
        self._capability_invocation: list[RelationshipInput] | None = None
        self._capability_delegation: list[RelationshipInput] | None = None
        self._verification_methods: list[VerificationMethodBuilder] | None = None
        self._derive_key_agreement = False
        self._also_known_as: list[str] | None = None
        self._controller: str | list[str] | None = None
        self._services: list[ServiceBuilder] | None = None
        self._metadata: DocumentMetadata | None = None

    @classmethod
    def from_document(cls, document: Document) -> DocumentBuilder:
        """Start from a copy of an existing document; no contexts are added."""
        builder = cls()
        builder._document = copy.deepcopy(document)
        builder._context = None
        return builder

    def also_known_as(self, aka: str) -> DocumentBuilder:
        """Add an also-known-as identifier."""
        self._also_known_as = (self._also_known_as or []) + [aka]
        return self

    def add_controller(self, controller: str) -> DocumentBuilder:
        """Add a controller. Chain to add more."""
        if self._controller is None:
            self._controller = controller
        elif isinstance(self._controller, str):
            self._controller = [self._controller, controller]
        else:
            self._controller.append(controller)
        return self

    def service(self, service: ServiceBuilder) -> DocumentBuilder:
        """Add a service. Chain to add more."""
        self._services = (self._services or []) + [service]
        return self

    def context(self, context: Any) -> DocumentBuilder:
        """Add a context: a string or a JSON object. Chain to add more."""
        self._context = (self._context or []) + [context]
        return self

    def assertion_method(self, assertion_method: RelationshipInput) -> DocumentBuilder:
        """Add a key ID or verification method to `assertionMethod`."""
        entry = _check_relationship(assertion_method)
        self._assertion_method = (self._assertion_method or []) + [entry]
        return self

    def authentication(self, authentication: RelationshipInput) -> DocumentBuilder:
        """Add a key ID or verification method to `authentication`."""
        entry = _check_relationship(authentication)
        self._authentication = (self._authentication or []) + [entry]
        return self

    def key_agreement(self, key_agreement: VerificationMethodBuilder) -> DocumentBuilder:
        """Add a verification method to `keyAgreement`."""
        if not isinstance(key_agreement, VerificationMethodBuilder):
            raise TypeError("key agreement must be a verification method builder")
        self._key_agreement = (self._key_agreement or []) + [key_agreement]
        return self

    def capability_invocation(self, capability_invocation: RelationshipInput) -> DocumentBuilder:
        """Add a key ID or verification method to `capabilityInvocation`."""
        entry = _check_relationship(capability_invocation)
        self._capability_invocation = (self._capability_invocation or []) + [entry]
        return self

    def capability_delegation(self, capability_delegation: RelationshipInput) -> DocumentBuilder:
        """Add a key ID or verification method to `capabilityDelegation`."""
        entry = _check_relationship(capability_delegation)
        self._capability_delegation = (self._capability_delegation or []) + [entry]
        return self

    def verification_method(self, builder: VerificationMethodBuilder) -> DocumentBuilder:
        """Add a verification method. Chain to add more."""
        self._verification_methods = (self._verification_methods or []) + [builder]
        return self

    def derive_key_agreement(self, derive: bool) -> DocumentBuilder:
        """Derive an X25519 key agreement from each Ed25519 verification method.

        A signing key should not normally be used for encryption; use this only
        where the DID method leaves no choice, such as `did:key`.
        """
        self._derive_key_agreement = derive
        return self

    def metadata(self, metadata: DocumentMetadata) -> DocumentBuilder:
        """Set the document metadata."""
        self._metadata = metadata
        return self

    def build(self, did: str | None = None) -> Document:
        """Build the document, stamping its metadata with the update time.

        A builder started from scratch needs the DID; one started from a
        document uses that document's ID and takes no DID.
        """
        if self._document is None:
            if did is None:
                raise DidError("a DID is required to build a new document")
            document = Document(id=did)
        else:
            if did is not None:
                raise DidError("builder started from a document takes no DID")
            document = copy.deepcopy(self._document)

        doc_id = document.id
        derived: list[Relationship] = []
        for builder in self._verification_methods or ():
            vm = builder.build(doc_id)
            if document.verification_methods is None:
                document.verification_methods = []
            document.verification_methods.append(vm)
            if self._derive_key_agreement:
                derived.append(_x25519_key_agreement(doc_id, vm.key.multibase()))

        document.assertion_method = _build_relationship(doc_id, self._assertion_method)
        document.authentication = _build_relationship(doc_id, self._authentication)
        key_agreement = _build_relationship(doc_id, self._key_agreement)
        if derived:
            key_agreement = derived + (key_agreement or [])
        document.key_agreement = key_agreement
        document.capability_invocation = _build_relationship(doc_id, self._capability_invocation)
        document.capability_delegation = _build_relationship(doc_id, self._capability_delegation)

        for builder in self._services or ():
            if document.services is None:
                document.services = []
            document.services.append(builder.build(doc_id))

        document.also_known_as = list(self._also_known_as) if self._also_known_as else None
        controller = self._controller
        document.controller = list(controller) if isinstance(controller, list) else controller

        metadata = copy.deepcopy(self._metadata) if self._metadata else DocumentMetadata()
        metadata.updated = datetime.now(timezone.utc)
        document.did_document_metadata = metadata

        if self._context is not None:
            document.context.extend(self._context)
        return document