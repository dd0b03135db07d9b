import itertools
import pytest
from typing import Dict, List, Optional, Set, Tuple

from bootstrapper.etcd.protocol import MembersAPI, NotFound, RemoteMember, Unreachable
from bootstrapper.member import Member, Roster
from bootstrapper.urls import UrlTemplates


class FakeDirectory(MembersAPI):
    def __init__(self, cluster: "FakeCluster", endpoint: str):
        self.cluster = cluster
        self.endpoint = endpoint

    def _check(self, op: str):
        if not self.cluster.running or self.endpoint in self.cluster.down:
            raise Unreachable(f"{self.endpoint} is down")
        if op in self.cluster.failures:
            raise self.cluster.failures[op]

    async def list_members(self) -> List[RemoteMember]:
        self.cluster.calls.append(("list", self.endpoint))
        self._check("list")
        return list(self.cluster.members)

    async def add_member(self, peer_url: str) -> Optional[RemoteMember]:
        self.cluster.calls.append(("add", peer_url))
        self._check("add")
        if self.cluster.reject_add:
            return None
        member = RemoteMember(id=str(next(self.cluster.ids)), peer_urls=[peer_url])
        self.cluster.members.append(member)
        return member

    async def remove_member(self, member_id: str):
        self.cluster.calls.append(("remove", member_id))
        self._check("remove")
        for member in self.cluster.members:
            if member.id == member_id:
                self.cluster.members.remove(member)
                return
        raise NotFound(member_id)


class FakeCluster:
    """
    In-memory cluster recording every membership call.
    """

    def __init__(self):
        self.running = False
        self.members: List[RemoteMember] = []
        self.down: Set[str] = set()
        self.failures: Dict[str, Exception] = {}
        self.reject_add = False
        self.calls: List[Tuple[str, str]] = []
        self.ids = itertools.count(100)

    def start(self, *members: RemoteMember) -> "FakeCluster":
        self.running = True
        self.members.extend(members)
        return self

    def transport(self, endpoint: str) -> FakeDirectory:
        return FakeDirectory(self, endpoint)


def remote(id: str, name: str, address: str) -> RemoteMember:
    return RemoteMember(id=id, name=name, peer_urls=[f"http://{address}:2380"])


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def urls() -> UrlTemplates:
    return UrlTemplates()


@pytest.fixture
def a() -> Member:
    return Member(name="a", address="10.0.0.1")


@pytest.fixture
def b() -> Member:
    return Member(name="b", address="10.0.0.2")


@pytest.fixture
def roster(a: Member, b: Member) -> Roster:
    return Roster.of([a, b])
