from aiohttp import web
import asyncio
import itertools
import pytest
from typing import Dict, List, Optional

from bootstrapper.etcd.client import Client
from bootstrapper.etcd.protocol import (
    Conflict,
    NotFound,
    ProtocolError,
    RemoteMember,
    Unreachable,
)


class FakeEtcd:
    """
    Minimal etcd v2 members API.
    """

    def __init__(self):
        self.members: List[Dict] = []
        self.ids = itertools.count(0x8E9E05C52164694D)
        self.delay = 0.0
        self.body: Optional[str] = None
        self.endpoint = ""

    async def list(self, request: web.Request) -> web.Response:
        await asyncio.sleep(self.delay)
        if self.body is not None:
            return web.Response(text=self.body)
        return web.json_response({"members": self.members})

    async def add(self, request: web.Request) -> web.Response:
        payload = await request.json()
        for member in self.members:
            if set(member["peerURLs"]) & set(payload["peerURLs"]):
                return web.json_response({"message": "peerURL exists"}, status=409)
        member = {
            "id": format(next(self.ids), "x"),
            "name": "",
            "peerURLs": payload["peerURLs"],
            "clientURLs": [],
        }
        self.members.append(member)
        return web.json_response(member, status=201)

    async def remove(self, request: web.Request) -> web.Response:
        member_id = request.match_info["id"]
        for member in self.members:
            if member["id"] == member_id:
                self.members.remove(member)
                return web.Response(status=204)
        return web.json_response({"message": "Member not found"}, status=404)


@pytest.fixture
async def etcd(unused_tcp_port: int) -> FakeEtcd:
    fake = FakeEtcd()
    app = web.Application()
    app.add_routes(
        [
            web.get("/v2/members", fake.list),
            web.post("/v2/members", fake.add),
            web.delete("/v2/members/{id}", fake.remove),
        ]
    )
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", unused_tcp_port)
    await site.start()
    fake.endpoint = f"http://127.0.0.1:{unused_tcp_port}"
    yield fake
    await runner.cleanup()


@pytest.mark.asyncio
async def test_list_members(etcd: FakeEtcd):
    etcd.members = [
        {
            "id": "1",
            "name": "a",
            "peerURLs": ["http://10.0.0.1:2380"],
            "clientURLs": ["http://10.0.0.1:2379"],
        },
        {"id": "2", "name": "", "peerURLs": ["http://10.0.0.2:2380"], "clientURLs": None},
    ]

    members = await Client(etcd.endpoint).list_members()

    assert members == [
        RemoteMember(
            id="1",
            name="a",
            peer_urls=["http://10.0.0.1:2380"],
            client_urls=["http://10.0.0.1:2379"],
        ),
        RemoteMember(id="2", name="", peer_urls=["http://10.0.0.2:2380"]),
    ]


@pytest.mark.asyncio
async def test_list_empty(etcd: FakeEtcd):
    assert await Client(etcd.endpoint).list_members() == []


@pytest.mark.asyncio
async def test_add_member(etcd: FakeEtcd):
    client = Client(etcd.endpoint)

    member = await client.add_member("http://10.0.0.3:2380")

    assert member.name == ""
    assert member.peer_urls == ("http://10.0.0.3:2380",)
    assert await client.list_members() == [member]


@pytest.mark.asyncio
async def test_add_existing_member(etcd: FakeEtcd):
    client = Client(etcd.endpoint)
    await client.add_member("http://10.0.0.3:2380")

    with pytest.raises(Conflict):
        await client.add_member("http://10.0.0.3:2380")


@pytest.mark.asyncio
async def test_remove_member(etcd: FakeEtcd):
    client = Client(etcd.endpoint)
    member = await client.add_member("http://10.0.0.3:2380")

    await client.remove_member(member.id)

    assert await client.list_members() == []
    with pytest.raises(NotFound):
        await client.remove_member(member.id)


@pytest.mark.asyncio
async def test_non_json_body(etcd: FakeEtcd):
    etcd.body = "<html>proxy error</html>"

    with pytest.raises(ProtocolError):
        await Client(etcd.endpoint).list_members()


@pytest.mark.asyncio
async def test_malformed_members(etcd: FakeEtcd):
    etcd.body = '{"members": [{"name": "a"}]}'

    with pytest.raises(ProtocolError):
        await Client(etcd.endpoint).list_members()


@pytest.mark.asyncio
async def test_unexpected_status(etcd: FakeEtcd):
    client = Client(etcd.endpoint + "/prefix")

    with pytest.raises(ProtocolError):
        await client.list_members()


@pytest.mark.asyncio
async def test_timeout(etcd: FakeEtcd):
    etcd.delay = 0.5

    with pytest.raises(Unreachable):
        await Client(etcd.endpoint, timeout=0.1).list_members()


@pytest.mark.asyncio
async def test_connection_refused(unused_tcp_port_factory):
    client = Client(f"http://127.0.0.1:{unused_tcp_port_factory()}")

    with pytest.raises(Unreachable):
        await client.list_members()
