"""Dereference resources within a DID document."""

from __future__ import annotations

import copy
from typing import Union

from didproof.document import Document
from didproof.method import DidError
from didproof.service import Service
from didproof.url import Url
from didproof.verification import VerificationMethod

Resource = Union[Document, VerificationMethod, Service]
"""A DID document or a part of one returned by dereferencing."""


def resource(url: Url, doc: Document) -> Resource:
    """Return the resource in `doc` that `url` refers to.

    A `service` query parameter selects a service, a URL without a fragment
    selects the whole document, and otherwise the URL selects a verification
    method by its full ID. Raises `DidError` if the resource is not found.
    """
    if url.query is not None and url.query.service is not None:
        service_id = url.query.service
        service = doc.service(service_id)
        if service is None:
            raise DidError(f"service {service_id} not found in document")
        return copy.deepcopy(service)
    if url.fragment is None:
        return copy.deepcopy(doc)
    vm = doc.verification_method(str(url))
    if vm is None:
        raise DidError(f"verification method {url} not found in document")
    return copy.deepcopy(vm)