from abc import ABC, abstractmethod
import attr
from attr.validators import deep_iterable, instance_of
import cattrs
from cattrs.gen import make_dict_structure_fn, override
from typing import List, Tuple

from bootstrapper.errors import BootstrapError


class DirectoryError(BootstrapError):
    pass


class Unreachable(DirectoryError):
    pass


class ProtocolError(DirectoryError):
    pass


class Conflict(DirectoryError):
    pass


class NotFound(DirectoryError):
    pass


_urls = deep_iterable(member_validator=instance_of(str), iterable_validator=instance_of(tuple))


@attr.s(frozen=True)
class RemoteMember:
    """
    A member as reported by a live cluster.

    An empty ``name`` means the member has been registered
    but has not started yet.
    """

    id: str = attr.ib(validator=instance_of(str))
    name: str = attr.ib(validator=instance_of(str), default="")
    peer_urls: Tuple[str, ...] = attr.ib(converter=tuple, validator=_urls, default=())
    client_urls: Tuple[str, ...] = attr.ib(converter=tuple, validator=_urls, default=())

    @property
    def peer_url(self) -> str:
        if not self.peer_urls:
            raise ProtocolError(f"Member {self.id} advertises no peer URLs")
        return self.peer_urls[0]


converter = cattrs.Converter()
converter.register_structure_hook(
    RemoteMember,
    make_dict_structure_fn(
        RemoteMember,
        converter,
        peer_urls=override(rename="peerURLs"),
        client_urls=override(rename="clientURLs"),
    ),
)


def structure_member(payload) -> RemoteMember:
    if not isinstance(payload, dict):
        raise ProtocolError(f"Expected a member object, got: {payload!r}")
    # Unstarted members come back with null fields
    payload = {key: value for key, value in payload.items() if value is not None}
    try:
        return converter.structure(payload, RemoteMember)
    except (cattrs.BaseValidationError, KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed member: {payload!r}") from e


def structure_members(payload) -> List[RemoteMember]:
    if not isinstance(payload, dict):
        raise ProtocolError(f"Expected a members object, got: {payload!r}")
    members = payload.get("members") or []
    if not isinstance(members, list):
        raise ProtocolError(f"Expected a list of members, got: {members!r}")
    return [structure_member(member) for member in members]


class MembersAPI(ABC):
    """
    Membership management of the cluster reachable at one endpoint.

    Mutating calls are not idempotent, callers check
    membership before adding or removing.
    """

    endpoint: str

    @abstractmethod
    async def list_members(self) -> List[RemoteMember]:
        ...

    @abstractmethod
    async def add_member(self, peer_url: str) -> RemoteMember:
        ...

    @abstractmethod
    async def remove_member(self, member_id: str):
        ...
