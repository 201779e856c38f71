"""Services: ways of communicating with the DID subject or related entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from didproof.method import DidError


@dataclass
class Service:
    """A service advertised by a DID document.

    `service_endpoint` is a single endpoint (a string or a JSON object) or a
    list of endpoints.
    """

    id: str = ""
    type_: str = ""
    service_endpoint: Any = ""

    @classmethod
    def build(cls) -> ServiceBuilder:
        """Start building a service."""
        return ServiceBuilder()

    def to_dict(self) -> dict[str, Any]:
        """Return the service as a JSON-ready dict."""
        return {"id": self.id, "type": self.type_, "serviceEndpoint": self.service_endpoint}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Service:
        """Read a service from a dict."""
        missing = [name for name in ("id", "type", "serviceEndpoint") if name not in data]
        if missing:
            raise DidError(f"service is missing: {', '.join(missing)}")
        return cls(id=data["id"], type_=data["type"], service_endpoint=data["serviceEndpoint"])


class ServiceBuilder:
    """Builds a service for a given DID."""

    def __init__(self) -> None:
        self._id: str | None = None
        self._service_type: str | None = None
        self._endpoints: list[Any] | None = None

    def id(self, id: str) -> ServiceBuilder:
        """Set the service ID, appended to the DID as a fragment."""
        self._id = id
        return self

    def service_type(self, service_type: str) -> ServiceBuilder:
        """Set the service type."""
        self._service_type = service_type
        return self

    def endpoint(self, endpoint: Any) -> ServiceBuilder:
        """Add an endpoint: a string or a JSON object. Chain to add more."""
        if self._endpoints is None:
            self._endpoints = []
        self._endpoints.append(endpoint)
        return self

    def build(self, did: str) -> Service:
        """Build the service for `did`."""
        if self._id is None:
            raise DidError("no id specified")
        if self._service_type is None:
            raise DidError("no type specified")
        if self._endpoints is None:
            raise DidError("no endpoints specified")
        endpoints = self._endpoints
        endpoint = endpoints[0] if len(endpoints) == 1 else list(endpoints)
        return Service(id=f"{did}#{self._id}", type_=self._service_type, service_endpoint=endpoint)