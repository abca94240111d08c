import asyncio
import logging
import re
import socket
from typing import Awaitable, Callable, List, Optional

from errors import InvalidURL, LookupFailure

logger = logging.getLogger("url_shortener.validator")

Resolver = Callable[[str], Awaitable[List[str]]]

SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
PATH_RE = re.compile(r"/.*$", re.DOTALL)


def extract_hostname(raw_url: str) -> str:
    """Strip a leading http(s) scheme and everything from the first slash."""
    return PATH_RE.sub("", SCHEME_RE.sub("", raw_url, count=1), count=1)


async def resolve_host(hostname: str) -> List[str]:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


class HostnameValidator:
    def __init__(self, resolver: Optional[Resolver] = None, timeout: Optional[float] = None):
        self.resolver = resolver or resolve_host
        self.timeout = timeout

    async def lookup(self, hostname: str) -> List[str]:
        try:
            return await asyncio.wait_for(self.resolver(hostname), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise LookupFailure(hostname, f"timed out after {self.timeout}s")
        except (OSError, UnicodeError) as e:
            raise LookupFailure(hostname, str(e))

    async def validate(self, raw_url: str) -> str:
        hostname = extract_hostname(raw_url)
        if not hostname:
            raise InvalidURL(hostname)
        try:
            addresses = await self.lookup(hostname)
        except LookupFailure as e:
            logger.warning(f"Lookup error for hostname={hostname}: {e.reason}")
            raise InvalidURL(hostname, cause=e) from e
        if not addresses:
            raise InvalidURL(hostname)
        logger.debug(f"Hostname {hostname} resolved to {addresses[0]}")
        return hostname
