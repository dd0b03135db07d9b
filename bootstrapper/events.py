"""
Events emitted while reconciling membership.

The engine reports progress through an observer callable instead
of logging, ``log_event`` is the observer used by default.
"""
import logging
from multimethod import multimethod

from bootstrapper.dataclasses import event
from bootstrapper.result import ReconciliationResult

logger = logging.getLogger(__name__)


@event
class Event:
    pass


@event
class ProbeFailed(Event):
    endpoint: str
    error: str


@event
class ClusterFound(Event):
    endpoint: str
    member_count: int


@event
class NoClusterFound(Event):
    candidates: int


@event
class CreatingCluster(Event):
    pass


@event
class JoiningCluster(Event):
    endpoint: str


@event
class AlreadyMember(Event):
    endpoint: str


@event
class RemovingMember(Event):
    member_id: str
    name: str
    peer_url: str


@event
class MemberRemoved(Event):
    member_id: str


@event
class AddingMember(Event):
    peer_url: str


@event
class MemberAdded(Event):
    member_id: str
    peer_url: str


@event
class Reconciled(Event):
    result: ReconciliationResult


@multimethod
def log_event(event: Event):
    logger.debug("%s", event)


@multimethod
def log_event(event: ProbeFailed):
    logger.warning("Unable to list members at %s: %s", event.endpoint, event.error)


@multimethod
def log_event(event: ClusterFound):
    logger.info(
        "Found cluster with %d members at %s", event.member_count, event.endpoint
    )


@multimethod
def log_event(event: NoClusterFound):
    logger.info("No live cluster among %d candidates", event.candidates)


@multimethod
def log_event(event: CreatingCluster):
    logger.info("Creating new cluster")


@multimethod
def log_event(event: JoiningCluster):
    logger.info("Joining existing cluster using client URL: %s", event.endpoint)


@multimethod
def log_event(event: AlreadyMember):
    logger.info("Already a member of the cluster at %s", event.endpoint)


@multimethod
def log_event(event: RemovingMember):
    logger.info(
        "Removing member %s (name=%r, peer=%s)",
        event.member_id,
        event.name,
        event.peer_url,
    )


@multimethod
def log_event(event: MemberRemoved):
    logger.info("Removed member %s", event.member_id)


@multimethod
def log_event(event: AddingMember):
    logger.info("Adding member: %s", event.peer_url)


@multimethod
def log_event(event: MemberAdded):
    logger.info("Added member %s: %s", event.member_id, event.peer_url)


@multimethod
def log_event(event: Reconciled):
    logger.info(
        "Initial cluster state %s: %s",
        event.result.cluster_state.value,
        ",".join(event.result.initial_cluster),
    )
