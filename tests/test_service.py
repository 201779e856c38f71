import pytest

from didproof.method import DidError
from didproof.service import Service, ServiceBuilder

DID = "did:web:example.com"


def _builder():
    return Service.build().id("linked").service_type("LinkedDomains")


def test_single_endpoint():
    svc = _builder().endpoint("https://example.com").build(DID)
    assert svc.id == f"{DID}#linked"
    assert svc.type_ == "LinkedDomains"
    assert svc.service_endpoint == "https://example.com"


def test_many_endpoints_become_list():
    obj = {"origins": ["https://example.com"]}
    svc = _builder().endpoint("https://example.com").endpoint(obj).build(DID)
    assert svc.service_endpoint == ["https://example.com", obj]


def test_to_dict_keys():
    svc = _builder().endpoint("https://example.com").build(DID)
    assert svc.to_dict() == {
        "id": f"{DID}#linked",
        "type": "LinkedDomains",
        "serviceEndpoint": "https://example.com",
    }


def test_round_trip():
    svc = _builder().endpoint("https://example.com").endpoint("https://example.com/b").build(DID)
    assert Service.from_dict(svc.to_dict()) == svc


@pytest.mark.parametrize(
    ("builder", "message"),
    [
        (ServiceBuilder().service_type("T").endpoint("e"), "no id specified"),
        (ServiceBuilder().id("x").endpoint("e"), "no type specified"),
        (ServiceBuilder().id("x").service_type("T"), "no endpoints specified"),
    ],
)
def test_missing_parts(builder, message):
    with pytest.raises(DidError, match=message):
        builder.build(DID)


def test_from_dict_missing():
    with pytest.raises(DidError):
        Service.from_dict({"id": "x", "type": "T"})