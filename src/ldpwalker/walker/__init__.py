import logging
from typing import NamedTuple, Union

from rdflib import Graph, URIRef

from ldpwalker import __version__
from ldpwalker.client import Client, TEXT_TURTLE, get_links
from ldpwalker.client.auth import get_authenticator
from ldpwalker.config import RunConfig
from ldpwalker.exceptions import DepthLimitExceeded, MalformedDescription, MalformedResponse
from ldpwalker.namespaces import ldp

logger = logging.getLogger(__name__)


class Container(NamedTuple):
    """An RDF source, with its parsed graph."""

    uri: str
    graph: Graph

    def children(self) -> list[str]:
        """URIs of the resources this container `ldp:contains`, in the
        graph's iteration order."""
        return [str(o) for _, _, o in self.graph.triples((URIRef(self.uri), ldp.contains, None))]


class BinaryResource(NamedTuple):
    """An [LDP Non-RDF Source](https://www.w3.org/TR/ldp/#ldpnr), with the URI
    of its single description."""

    uri: str
    description_uri: str


class Walker:
    """Depth-first walk of the `ldp:contains` tree below `config.base_url`.

    ```python
    config = resolve(['-b', 'http://localhost:8080/fcrepo/rest/'])
    with Walker(config) as walker:
        total = walker.run()
    ```

    Every visited resource is classified with a HEAD request. Binaries
    (resources with a `rel="type"` link to `ldp:NonRDFSource`) must have
    exactly one `rel="describedby"` link, and that description must be
    retrievable; binaries have no children. Everything else is fetched as
    Turtle and its `ldp:contains` objects are walked in turn.

    Visited URLs are not remembered. If the repository contains a
    containment cycle, the walk does not terminate unless `config.max_depth`
    is set.
    """

    def __init__(self, config: RunConfig, client: Client = None):
        self.config = config
        if client is None:
            client = Client(
                auth=get_authenticator(config.username, config.password),
                server_cert=config.server_cert,
                ua_string=f'ldpwalker/{__version__}',
                max_per_route=config.max_per_route,
                idle_timeout=config.idle_timeout,
            )
        self.client = client
        self.count = 0
        """Number of resources whose visit has started in the current (or
        most recent) run. A resource is counted before it is validated."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.client.close()

    def run(self) -> int:
        """Walk the whole tree below the base URL and return the number of
        resources visited. Any error aborts the walk."""
        self.count = 0
        max_depth = self.config.max_depth
        # pending (url, depth) pairs; the top of the stack is visited next
        pending = [(self.config.base_url, 0)]
        while pending:
            url, depth = pending.pop()
            if max_depth is not None and depth > max_depth:
                raise DepthLimitExceeded(url, depth, max_depth)

            logger.info(f'{self.count} - Get: {url}')
            self.count += 1

            resource = self.describe(url)
            if isinstance(resource, Container):
                # reversed, so the first child is popped (and walked) first
                pending.extend((child, depth + 1) for child in reversed(resource.children()))

        return self.count

    def describe(self, url: str) -> Union[Container, BinaryResource]:
        """Classify the resource at `url` and fetch what is needed to verify it."""
        head = self.client.head(url)
        links = get_links(head)
        types = links.get('type', [])
        logger.debug(f'Link headers: {types}')

        if str(ldp.NonRDFSource) in types:
            logger.debug(f'Get NonRdfSource Description for: {url}')
            return BinaryResource(url, self.verify_description(url, links.get('describedby', [])))
        else:
            logger.debug(f'Get triples for: {url}')
            return Container(url, self.get_graph(url))

    def verify_description(self, url: str, descriptions: list[str]) -> str:
        if len(descriptions) != 1:
            raise MalformedDescription(url, descriptions)

        description_uri = descriptions[0]
        # only the status matters; the description itself is not examined
        self.client.get(description_uri, accept=TEXT_TURTLE).close()
        return description_uri

    def get_graph(self, url: str) -> Graph:
        response = self.client.get(url, accept=TEXT_TURTLE)
        try:
            return Graph().parse(data=response.content, format='turtle', publicID=url)
        except Exception as e:
            # rdflib reports bad input with a variety of exception types
            raise MalformedResponse(f'Unable to parse the RDF of {url}: {e}') from e
