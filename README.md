# didproof

Tools for working with Decentralized Identifiers (DIDs): parsing DID URLs,
building DID documents with verification methods and services, converting
public keys between multibase and JSON Web Key form, and dereferencing
resources from a document. The `did:key`, `did:web` and `did:webvh` method
names are recognised in DID URLs.

The package has no runtime dependencies. Python 3.10 or later is required.

## Installation

```
pip install didproof
```

## Parsing DID URLs

```python
from didproof.method import Method
from didproof.url import Url

url = Url.parse("did:key:123456789abcdefghi/path/to/resource?service=example&hl=hashlink#key-1")
assert url.method is Method.KEY
assert url.id == "123456789abcdefghi"
assert url.path == ["path", "to", "resource"]
assert url.query.service == "example"
assert url.query.hashlink == "hashlink"
assert url.fragment == "key-1"
assert url.did() == "did:key:123456789abcdefghi"
assert url.resource_id() == "did:key:123456789abcdefghi#key-1"
assert str(url) == "did:key:123456789abcdefghi/path/to/resource?service=example&hl=hashlink#key-1"
```

A port encoded in the identifier as `%3A<port>` is kept in `Url.id`. The
recognised query parameters are `service`, `relativeRef` (or
`relative-ref`), `versionId`, `versionTime` and `hl`; others are ignored.
An unsupported method or a malformed URL raises `didproof.method.DidError`.

The module also exposes the step-by-step parsers `parse_scheme`,
`parse_method`, `parse_id`, `parse_port`, `parse_path`, `parse_query`,
`parse_fragment` and `parse_url`; each returns a pair of the remaining input
and the parsed value.

## Keys

`didproof.multikey` handles base58btc multibase strings (`z` prefix) carrying
multicodec-tagged Ed25519 or X25519 public keys:

```python
from didproof.multikey import PublicKeyJwk, derive_x25519_multikey

jwk = PublicKeyJwk.from_multibase("z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu")
print(jwk.to_dict())
# {'kty': 'OKP', 'crv': 'Ed25519', 'x': 'Zmq-CJA17UpFeVmJ-nIKDuDEhUnoRSNIXFbxyBtCh6Y'}
assert jwk.to_multibase() == "z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"

x25519 = derive_x25519_multikey("z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu")
```

`base58_encode`, `base58_decode`, `multibase_encode`, `multibase_decode` and
`ed25519_to_x25519` are available as well.

## Verification methods

```python
from didproof.verification import KeyId, VerificationMethod

vm = (
    VerificationMethod.build()
    .key("z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu")
    .key_id(KeyId.verification())
    .build("did:web:example.com")
)
print(vm.to_dict())
# {'id': 'did:web:example.com#z6MkmM42...', 'controller': 'did:web:example.com',
#  'type': 'Multikey', 'publicKeyMultibase': 'z6MkmM42...'}
```

A key may be given as a multibase string (stored as `Multikey`) or as a
`PublicKeyJwk` (stored as `JsonWebKey`). Either form returns the other with
`vm.key.jwk()` and `vm.key.multibase()`. The method's ID is formed by the
`KeyId`: `KeyId.did()` (the DID alone, the default), `KeyId.verification()`
(the key's multibase value as fragment), `KeyId.authorization(key)` or
`KeyId.index(index)` (the given value as fragment).

## Building a DID document

```python
from didproof.document import DocumentBuilder, DocumentMetadataBuilder
from didproof.service import Service
from didproof.verification import KeyId, VerificationMethod

doc = (
    DocumentBuilder()
    .verification_method(
        VerificationMethod.build()
        .key("z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu")
        .key_id(KeyId.verification())
    )
    .derive_key_agreement(True)
    .authentication("z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu")
    .service(
        Service.build()
        .id("messaging")
        .service_type("DIDCommMessaging")
        .endpoint("https://messaging.example.com")
    )
    .add_controller("did:web:example.com")
    .metadata(DocumentMetadataBuilder().version_id("1").build())
    .build("did:web:example.com")
)
print(doc.to_dict())
```

- A builder started with `DocumentBuilder()` adds the DID v1 and CID v1
  contexts and needs the DID passed to `build`. One started with
  `DocumentBuilder.from_document(doc)` extends a copy of that document, adds
  no contexts, and its `build()` takes no DID.
- Strings given to `authentication`, `assertion_method`,
  `capability_invocation` and `capability_delegation` become references
  `<did>#<value>`; verification method builders are embedded.
- `derive_key_agreement(True)` adds an X25519 key-agreement method derived
  from each Ed25519 verification method.
- Service IDs become `<did>#<id>`; a single endpoint is stored as is, several
  as a list.
- `build` stamps the metadata's `updated` time with the current UTC time.

`Document`, `DocumentMetadata`, `VerificationMethod`, `Service` and
`didproof.proof.Proof` each have `to_dict()` and `from_dict()` for JSON-ready
dictionaries. `Document.service(id)` and `Document.verification_method(id)`
look items up by their full ID.

## Dereferencing

```python
from didproof.key import resolve
from didproof.resolve import resource
from didproof.url import Url

vm = resource(
    Url.parse("did:web:example.com#z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"), doc
)
whole = resource(Url.parse("did:web:example.com"), doc)

key_vm = resolve(Url.parse(
    "did:key:z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"
    "#z6MkmM42vxfqZQsv4ehtTjFFxQ4sQKS2w6WR7emozFAn5cxu"
))
```

`resource` returns the service named by a `service` query parameter, the
whole document when the URL has no fragment, and otherwise the verification
method whose ID equals the URL. A service is matched on its ID exactly as
given in the query. `didproof.key.resolve` turns a `did:key` URL into the
verification method its fragment encodes. Missing resources raise `DidError`.

## What the package does not do

- It does not fetch documents: `did:web` and `did:webvh` DIDs are parsed but
  not resolved over the network, and there is no log handling for `did:webvh`.
- It does not create or check signatures. `Proof` is a data structure for
  data integrity proofs; nothing here computes or verifies `proofValue`.
- It has no command-line tool and no server.

## Running the tests

```
pip install -e ".[test]"
pytest
```