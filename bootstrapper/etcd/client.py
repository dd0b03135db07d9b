"""
Client for the etcd v2 members API.
"""
import aiohttp
from aiohttp import ClientSession, ClientTimeout
import asyncio
import json
import logging
import ssl
from typing import Any, List, Optional, Tuple
from yarl import URL

from bootstrapper.etcd.protocol import (
    Conflict,
    MembersAPI,
    NotFound,
    ProtocolError,
    RemoteMember,
    Unreachable,
    structure_member,
    structure_members,
)

logger = logging.getLogger(__name__)

# Same as the etcd client's default request timeout.
DEFAULT_REQUEST_TIMEOUT = 5.0


class Client(MembersAPI):
    def __init__(
        self,
        endpoint: str,
        ssl_context: Optional[ssl.SSLContext] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.ssl_context = ssl_context
        self.timeout = timeout

    def _url(self, *parts: str) -> URL:
        url = URL(self.endpoint) / "v2" / "members"
        for part in parts:
            url = url / part
        return url

    async def _request(
        self, method: str, url: URL, payload: Any = None
    ) -> Tuple[int, bytes]:
        kwargs = {}
        if payload is not None:
            kwargs["json"] = payload
        if self.ssl_context is not None:
            kwargs["ssl"] = self.ssl_context

        logger.debug("%s %s", method, url)
        try:
            async with ClientSession(
                timeout=ClientTimeout(total=self.timeout)
            ) as session:
                async with session.request(method, url, **kwargs) as resp:
                    return resp.status, await resp.read()
        except asyncio.TimeoutError as e:
            raise Unreachable(f"{method} {url} timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise Unreachable(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _decode(url: URL, body: bytes) -> Any:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ProtocolError(f"{url} returned a non-JSON body: {body[:200]!r}") from e

    @staticmethod
    def _unexpected(method: str, url: URL, status: int, body: bytes) -> ProtocolError:
        return ProtocolError(
            f"{method} {url} returned unexpected status {status}: {body[:200]!r}"
        )

    async def list_members(self) -> List[RemoteMember]:
        url = self._url()
        status, body = await self._request("GET", url)
        if status != 200:
            raise self._unexpected("GET", url, status, body)
        return structure_members(self._decode(url, body))

    async def add_member(self, peer_url: str) -> RemoteMember:
        url = self._url()
        status, body = await self._request("POST", url, {"peerURLs": [peer_url]})
        if status == 409:
            raise Conflict(f"{peer_url} is already a member: {body[:200]!r}")
        if status not in (200, 201):
            raise self._unexpected("POST", url, status, body)
        return structure_member(self._decode(url, body))

    async def remove_member(self, member_id: str):
        url = self._url(member_id)
        status, body = await self._request("DELETE", url)
        if status in (404, 410):
            raise NotFound(f"No such member: {member_id}")
        if status not in (200, 204):
            raise self._unexpected("DELETE", url, status, body)

    def __repr__(self) -> str:
        return f"Client(endpoint={self.endpoint!r})"
