import logging
import time
from http import HTTPStatus
from urllib.parse import urljoin

from requests import Response, Session
from requests.adapters import HTTPAdapter
from requests.auth import AuthBase
from requests.exceptions import RequestException
from requests.utils import parse_header_links

from ldpwalker.exceptions import TransportError, UnexpectedStatus, reason_phrase

logger = logging.getLogger(__name__)

TEXT_TURTLE = 'text/turtle'

ACCEPTABLE_STATUSES = {HTTPStatus.OK, HTTPStatus.TEMPORARY_REDIRECT}
"""Redirects are never followed, so a 307 counts as a successful response."""

DEFAULT_MAX_PER_ROUTE = 20
DEFAULT_IDLE_TIMEOUT = 3


def get_links(response: Response) -> dict[str, list[str]]:
    """Parse every `Link` header of `response` into a dictionary mapping each
    relation name to the list of target URIs with that relation. Unlike
    `Response.links`, repeated relations are all kept:

    ```pycon
    >>> response.headers['Link']
    '<http://www.w3.org/ns/ldp#Resource>;rel="type", <http://www.w3.org/ns/ldp#BasicContainer>;rel="type"'

    >>> get_links(response)
    {'type': ['http://www.w3.org/ns/ldp#Resource', 'http://www.w3.org/ns/ldp#BasicContainer']}
    ```

    Relative targets are resolved against the URL of the response."""
    links: dict[str, list[str]] = {}
    header = response.headers.get('Link')
    if not header:
        return links
    for link in parse_header_links(header):
        if 'url' not in link or 'rel' not in link:
            continue
        target = urljoin(response.url or '', link['url'])
        # the rel attribute may hold several space-separated relation types
        for rel in link['rel'].split():
            links.setdefault(rel, []).append(target)
    return links


class SessionHeaderAttribute:
    """Descriptor that maps an attribute to a session header name. Requires
    the instance to have a `session` attribute with a `headers` attribute whose
    value is a mapping that supports the methods `get()` and `update()`, plus
    the `del` operator."""

    def __init__(self, header_name: str):
        self.header_name = header_name
        """The HTTP header name"""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.session.headers.get(self.header_name, None)

    def __set__(self, instance, value):
        if value is not None:
            instance.session.headers.update({self.header_name: str(value)})

    def __delete__(self, instance):
        try:
            del instance.session.headers[self.header_name]
        except KeyError:
            pass


class IdleReclaimingAdapter(HTTPAdapter):
    """Pooling transport adapter that drops its pooled connections once they
    have sat unused for longer than `idle_timeout` seconds."""

    def __init__(self, idle_timeout: float = DEFAULT_IDLE_TIMEOUT, **kwargs):
        super().__init__(**kwargs)
        self.idle_timeout = idle_timeout
        self.last_used = None

    def send(self, request, **kwargs):
        now = time.monotonic()
        if self.last_used is not None and now - self.last_used > self.idle_timeout:
            logger.debug(f'Connections idle for more than {self.idle_timeout}s; reclaiming pool')
            self.poolmanager.clear()
        try:
            return super().send(request, **kwargs)
        finally:
            self.last_used = time.monotonic()


class Client:
    """Read-only HTTP client for walking an LDP repository."""
    ua_string = SessionHeaderAttribute('User-Agent')
    """`User-Agent` header value"""
    session: Session
    """Underlying Requests library
    [Session object](https://requests.readthedocs.io/en/latest/user/advanced/#session-objects),
    or a subclass thereof"""

    def __init__(
        self,
        auth: AuthBase = None,
        server_cert: str = None,
        ua_string: str = None,
        max_per_route: int = DEFAULT_MAX_PER_ROUTE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        session: Session = None,
    ):
        if session is None:
            # defaults to a basic requests.Session object with one shared
            # connection pool per scheme
            self.session = Session()
            adapter = IdleReclaimingAdapter(
                idle_timeout=idle_timeout,
                pool_connections=max_per_route,
                pool_maxsize=max_per_route,
            )
            self.session.mount('http://', adapter)
            self.session.mount('https://', adapter)
        else:
            # otherwise, use the session object as is
            self.session = session

        self.session.auth = auth
        if server_cert is not None:
            self.session.verify = server_cert

        self.ua_string = ua_string

    def request(self, method: str, url: str, **kwargs) -> Response:
        """Send an HTTP request using the configured `session`. Additional
        keyword arguments are passed to the underlying `session.request()`
        method.

        Raises a `TransportError` if the request could not be completed."""
        logger.debug(f'{method} {url}')
        try:
            response = self.session.request(method, url, **kwargs)
        except RequestException as e:
            message = ' '.join(str(arg) for arg in e.args)
            logger.error(message)
            raise TransportError(f'Connection error: {message}') from e
        logger.debug(f'{response.status_code} {reason_phrase(response)}'.rstrip())
        return response

    @staticmethod
    def check_status(response: Response) -> Response:
        """Return `response` if its status is 200 or 307. Otherwise, raise
        an `UnexpectedStatus` error."""
        if response.status_code not in ACCEPTABLE_STATUSES:
            logger.error(f'Unexpected response status: {response.status_code}, {response.url}')
            raise UnexpectedStatus(response)
        return response

    def head(self, url: str) -> Response:
        """Send an HTTP HEAD request to `url` without following redirects."""
        return self.check_status(self.request('HEAD', url, allow_redirects=False))

    def get(self, url: str, accept: str = TEXT_TURTLE) -> Response:
        """Send an HTTP GET request to `url` with the given `Accept` header,
        without following redirects."""
        return self.check_status(
            self.request('GET', url, headers={'Accept': accept}, allow_redirects=False)
        )

    def close(self):
        self.session.close()
