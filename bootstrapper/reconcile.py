"""
Membership reconciliation.

Decides whether the local member creates a new cluster or joins a
live one and, when joining, evicts members that are not part of the
roster before registering itself.

    Probing -> Creating   -> Done
            -> Joining    -> Done
            -> Registered -> Done

Once a live member list has been fetched, its endpoint is used for every
following call and any failure there aborts the whole pass.
"""
from multimethod import multimethod
from typing import Any, Callable, Iterable, List, Tuple, Union

from bootstrapper.dataclasses import dataclass
from bootstrapper.errors import AddRejected
from bootstrapper.etcd.protocol import MembersAPI, RemoteMember
from bootstrapper.events import (
    AddingMember,
    AlreadyMember,
    CreatingCluster,
    JoiningCluster,
    MemberAdded,
    MemberRemoved,
    Reconciled,
    RemovingMember,
    log_event,
)
from bootstrapper.member import Member, Roster
from bootstrapper.probe import probe
from bootstrapper.result import ClusterState, ReconciliationResult
from bootstrapper.urls import UrlTemplates, peer_host


@dataclass
class Context:
    me: Member
    roster: Roster
    force: bool
    urls: UrlTemplates
    transport: Callable[[str], MembersAPI]
    observer: Callable[[Any], None]


@dataclass
class Probing:
    context: Context


@dataclass
class Creating:
    """
    No live cluster, form a new one from the roster.
    """

    context: Context


@dataclass
class Joining:
    """
    Join a live cluster, pruning members that are not in the roster.
    """

    context: Context
    directory: MembersAPI
    members: List[RemoteMember]


@dataclass
class Registered:
    """
    Already listed by name in a live cluster and not forced to rejoin.
    """

    context: Context
    directory: MembersAPI
    members: List[RemoteMember]


@dataclass
class Done:
    result: ReconciliationResult


State = Union[Probing, Creating, Joining, Registered, Done]


def initial_cluster(
    members: Iterable[RemoteMember], me: Member, peer_url: str
) -> Tuple[str, ...]:
    # Unstarted members have no name yet and cannot be listed.
    pairs = [
        f"{member.name}={member.peer_url}"
        for member in members
        if member.name and member.name != me.name
    ]
    pairs.append(f"{me.name}={peer_url}")
    return tuple(pairs)


@multimethod
async def step(state: Probing) -> Union[Creating, Joining, Registered]:
    context = state.context
    found = await probe(
        context.roster,
        context.me,
        context.urls,
        context.transport,
        observer=context.observer,
    )
    if found is None or not found.members:
        return Creating(context=context)

    is_member = any(member.name == context.me.name for member in found.members)
    if not is_member or context.force:
        return Joining(
            context=context, directory=found.directory, members=list(found.members)
        )
    return Registered(
        context=context, directory=found.directory, members=list(found.members)
    )


@multimethod
async def step(state: Creating) -> Done:
    context = state.context
    context.observer(CreatingCluster())
    pairs = [
        f"{member.name}={context.urls.peer_url(member.address)}"
        for member in context.roster
    ]
    return Done(
        result=ReconciliationResult(
            name=context.me.name,
            cluster_state=ClusterState.new,
            initial_cluster=pairs,
        )
    )


@multimethod
async def step(state: Joining) -> Done:
    context = state.context
    me = context.me
    directory = state.directory
    context.observer(JoiningCluster(endpoint=directory.endpoint))

    addresses = context.roster.addresses()
    add_required = True
    for member in state.members:
        host = peer_host(member.peer_url)
        stale_self = context.force and member.name == me.name
        if host not in addresses or stale_self:
            context.observer(
                RemovingMember(
                    member_id=member.id, name=member.name, peer_url=member.peer_url
                )
            )
            await directory.remove_member(member.id)
            context.observer(MemberRemoved(member_id=member.id))
        elif host == me.host:
            # Registered already, possibly not started yet.
            add_required = False

    members = await directory.list_members()
    peer_url = context.urls.peer_url(me.address)
    pairs = initial_cluster(members, me, peer_url)

    if add_required:
        context.observer(AddingMember(peer_url=peer_url))
        added = await directory.add_member(peer_url)
        if added is None:
            raise AddRejected(f"{directory.endpoint} did not add {peer_url}")
        context.observer(MemberAdded(member_id=added.id, peer_url=peer_url))

    return Done(
        result=ReconciliationResult(
            name=me.name, cluster_state=ClusterState.existing, initial_cluster=pairs
        )
    )


@multimethod
async def step(state: Registered) -> Done:
    context = state.context
    context.observer(AlreadyMember(endpoint=state.directory.endpoint))
    peer_url = context.urls.peer_url(context.me.address)
    return Done(
        result=ReconciliationResult(
            name=context.me.name,
            cluster_state=ClusterState.existing,
            initial_cluster=initial_cluster(state.members, context.me, peer_url),
        )
    )


async def reconcile(
    me: Member,
    roster: Roster,
    urls: UrlTemplates,
    transport: Callable[[str], MembersAPI],
    force: bool = False,
    observer: Callable[[Any], None] = log_event,
) -> ReconciliationResult:
    """
    Run one reconciliation pass for `me` against `roster`.

    Args:
        me (Member): The local member, which must be part of `roster`.
        roster (Roster): Every intended member of the cluster.
        urls (UrlTemplates): Derives client and peer URLs from addresses.
        transport (Callable[[str], MembersAPI]): Creates a membership
            client for a client URL.
        force (bool): Evict and re-add the local member even if the
            cluster already lists it by name.
        observer (Callable[[Any], None]): Receives progress events.

    Raises:
        ConfigError: `me` is not part of `roster`.
        DirectoryError: A membership call failed after a live
            cluster was found.
        AddRejected: The cluster did not return the added member.
    """
    roster.require(me)
    state: State = Probing(
        context=Context(
            me=me,
            roster=roster,
            force=force,
            urls=urls,
            transport=transport,
            observer=observer,
        )
    )
    while not isinstance(state, Done):
        state = await step(state)
    observer(Reconciled(result=state.result))
    return state.result
