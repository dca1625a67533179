"""Common test fixtures for ldpwalker"""
from typing import Callable, Iterable

import httpretty
import pytest
import requests
from rdflib import Graph, URIRef

from ldpwalker.config import RunConfig
from ldpwalker.namespaces import ldp

CONTAINER_LINKS = ', '.join([
    f'<{ldp.Resource}>;rel="type"',
    f'<{ldp.Container}>;rel="type"',
    f'<{ldp.BasicContainer}>;rel="type"',
])


def binary_links(descriptions: Iterable[str]) -> str:
    return ', '.join([
        f'<{ldp.Resource}>;rel="type"',
        f'<{ldp.NonRDFSource}>;rel="type"',
        *(f'<{uri}>; rel="describedby"' for uri in descriptions),
    ])


@pytest.fixture
def monkeypatch_request(monkeypatch):
    def _monkeypatch_request(response):
        if isinstance(response, type):
            response = response()
        monkeypatch.setattr(requests.Session, 'request', lambda *args, **kwargs: response)
    return _monkeypatch_request


@pytest.fixture
def base_url() -> str:
    return 'http://localhost:9999/rest/container'


@pytest.fixture
def run_config(base_url) -> RunConfig:
    return RunConfig(base_url=base_url)


@pytest.fixture
def register_container() -> Callable[..., None]:
    """Pytest fixture that uses HTTPretty to simulate an LDP container that
    responds to HEAD and GET. Its Turtle representation lists `children` with
    `ldp:contains`."""
    def _register_container(
        uri: str,
        children: Iterable[str] = (),
        head_status: int = 200,
        get_status: int = 200,
        body: str = None,
    ):
        if body is None:
            graph = Graph()
            for child in children:
                graph.add((URIRef(uri), ldp.contains, URIRef(child)))
            body = graph.serialize(format='turtle')
        httpretty.register_uri(
            method=httpretty.HEAD,
            uri=uri,
            status=head_status,
            body='',
            adding_headers={
                'Link': CONTAINER_LINKS,
            },
        )
        httpretty.register_uri(
            method=httpretty.GET,
            uri=uri,
            status=get_status,
            body=body,
            content_type='text/turtle',
            adding_headers={
                'Link': CONTAINER_LINKS,
            },
        )
    return _register_container


@pytest.fixture
def register_binary() -> Callable[..., list[str]]:
    """Pytest fixture that uses HTTPretty to simulate an LDP Non-RDF Source
    whose HEAD response links to the given `descriptions`. By default, each
    description URI responds to GET with `description_status`. Returns the
    list of description URIs."""
    def _register_binary(
        uri: str,
        descriptions: Iterable[str] = None,
        head_status: int = 200,
        description_status: int = 200,
    ) -> list[str]:
        if descriptions is None:
            descriptions = [uri + '/fcr:metadata']
        descriptions = list(descriptions)
        httpretty.register_uri(
            method=httpretty.HEAD,
            uri=uri,
            status=head_status,
            body='',
            adding_headers={
                'Link': binary_links(descriptions),
                'Content-Type': 'image/tiff',
            },
        )
        for description in descriptions:
            graph = Graph()
            graph.add((URIRef(uri), ldp.membershipResource, URIRef(uri)))
            httpretty.register_uri(
                method=httpretty.GET,
                uri=description,
                status=description_status,
                body=graph.serialize(format='turtle'),
                content_type='text/turtle',
            )
        return descriptions
    return _register_binary


@pytest.fixture
def requested_paths() -> Callable[[str], list[str]]:
    """Paths of the requests HTTPretty received, optionally only those made
    with the given HTTP method."""
    def _requested_paths(method: str = None) -> list[str]:
        return [
            request.path for request in httpretty.latest_requests()
            if method is None or request.method == method
        ]
    return _requested_paths
