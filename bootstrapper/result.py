"""
Outcome of a reconciliation pass.
"""
import attr
from attr.validators import deep_iterable, instance_of
from enum import Enum
from typing import Tuple


class ClusterState(Enum):
    new = "new"
    existing = "existing"


@attr.s(frozen=True)
class ReconciliationResult:
    """
    Startup parameters for the local etcd member.

    ``initial_cluster`` holds ``name=peerURL`` pairs, with the
    local member always present exactly once.
    """

    name: str = attr.ib(validator=instance_of(str))
    cluster_state: ClusterState = attr.ib(validator=instance_of(ClusterState))
    initial_cluster: Tuple[str, ...] = attr.ib(
        converter=tuple,
        validator=deep_iterable(
            member_validator=instance_of(str), iterable_validator=instance_of(tuple)
        ),
    )
