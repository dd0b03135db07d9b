import attr
from attr.validators import deep_iterable, instance_of
from typing import Callable, Optional, Tuple

from bootstrapper.etcd.protocol import MembersAPI, ProtocolError, RemoteMember, Unreachable
from bootstrapper.events import ClusterFound, Event, NoClusterFound, ProbeFailed, log_event
from bootstrapper.member import Member, Roster
from bootstrapper.urls import UrlTemplates


@attr.s(frozen=True)
class Found:
    directory: MembersAPI = attr.ib(validator=instance_of(MembersAPI))
    members: Tuple[RemoteMember, ...] = attr.ib(
        converter=tuple,
        validator=deep_iterable(
            member_validator=instance_of(RemoteMember),
            iterable_validator=instance_of(tuple),
        ),
    )


async def probe(
    roster: Roster,
    me: Member,
    urls: UrlTemplates,
    transport: Callable[[str], MembersAPI],
    observer: Callable[[Event], None] = log_event,
) -> Optional[Found]:
    """
    Find the first peer, in roster order, that answers with its member list.

    Returns None when no other roster member can be reached,
    meaning there is no live cluster yet.
    """
    candidates = roster.others(me)
    for member in candidates:
        endpoint = urls.listen_url(member.address)
        directory = transport(endpoint)
        try:
            members = await directory.list_members()
        except (Unreachable, ProtocolError) as e:
            observer(ProbeFailed(endpoint=endpoint, error=str(e)))
            continue
        observer(ClusterFound(endpoint=endpoint, member_count=len(members)))
        return Found(directory=directory, members=members)

    observer(NoClusterFound(candidates=len(candidates)))
    return None
