"""Plain httpx clients with bounded timeouts and redirects, no retries."""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict
from urllib.parse import urlsplit

import httpx

from contentpulse_sync.config.http import HttpConfig, media_fetch_config
from contentpulse_sync.domain.errors import MediaFetchFailure
from contentpulse_sync.domain.ports.media import FetchedFile
from contentpulse_sync.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from httpx._types import HeaderTypes, TimeoutTypes

    from contentpulse_sync.domain.result import Result

log = getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})

type HostResolver = Callable[[str], Iterable[str]]
type ClientFactory = Callable[[HttpConfig], httpx.Client]


class ClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    follow_redirects: bool
    max_redirects: int
    transport: httpx.BaseTransport


def client_options(config: HttpConfig) -> ClientOptions:
    options: ClientOptions = {
        "timeout": httpx.Timeout(config.timeout_seconds),
        "follow_redirects": config.max_redirects > 0,
        "max_redirects": config.max_redirects,
    }
    if config.base_url:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    return options


def build_client(config: HttpConfig) -> httpx.Client:
    return httpx.Client(**client_options(config))


def resolve_host_addresses(host: str) -> list[str]:
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return [str(info[4][0]) for info in infos]


def is_public_address(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def is_public_url(url: str, *, resolve_host: HostResolver = resolve_host_addresses) -> bool:
    """Return whether ``url`` is http(s) and every address of its host is public."""

    try:
        parts = urlsplit(url)
    except ValueError:
        log.warning("Malformed URL %r", url)
        return False
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
        return False
    host = parts.hostname
    try:
        ipaddress.ip_address(host)
    except ValueError:
        if host.lower() == "localhost" or host.lower().endswith(".localhost"):
            return False
        try:
            addresses = list(resolve_host(host))
        except OSError:
            log.warning("Could not resolve host %s", host)
            return False
    else:
        addresses = [host]
    return bool(addresses) and all(is_public_address(address) for address in addresses)


@dataclass(slots=True)
class HttpFileFetcher:
    """Direct download used as the media fallback; does not check the target host."""

    config: HttpConfig = field(default_factory=media_fetch_config)
    client_factory: ClientFactory = field(default=build_client)

    def __call__(self, url: str) -> Result[FetchedFile, MediaFetchFailure]:
        try:
            with self.client_factory(self.config) as client:
                response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return Err(MediaFetchFailure(f"Download of {url} failed: {exc}"))
        return Ok(
            FetchedFile(
                status_code=response.status_code,
                content=response.content,
                content_type=response.headers.get("content-type"),
            )
        )


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.media import RemoteFileFetcher

    _fetcher_check: RemoteFileFetcher = HttpFileFetcher()
