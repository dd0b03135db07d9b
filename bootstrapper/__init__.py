"""
Bootstraps a member into an etcd cluster at first boot.
"""
from bootstrapper.errors import AddRejected, BootstrapError, ConfigError, WriteError
from bootstrapper.member import Member, Roster, parse_member, parse_members
from bootstrapper.reconcile import reconcile
from bootstrapper.result import ClusterState, ReconciliationResult

__all__ = [
    "AddRejected",
    "BootstrapError",
    "ClusterState",
    "ConfigError",
    "Member",
    "ReconciliationResult",
    "Roster",
    "WriteError",
    "parse_member",
    "parse_members",
    "reconcile",
]
