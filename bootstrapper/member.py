"""
Intended cluster members, as configured.
"""
import attr
from attr.validators import deep_iterable, instance_of
from pyrsistent import PVector, pvector, v
from typing import Iterable, Iterator, Set

from bootstrapper.errors import ConfigError


def _non_empty(instance, attribute, value: str):
    if not value:
        raise ConfigError(f"Member {attribute.name} must not be empty")


@attr.s(frozen=True)
class Member:
    name: str = attr.ib(validator=[instance_of(str), _non_empty])
    address: str = attr.ib(validator=[instance_of(str), _non_empty])

    @property
    def host(self) -> str:
        # Hostnames compare case-insensitively.
        return self.address.lower()

    def __str__(self) -> str:
        return f"{self.name}={self.address}"


@attr.s(frozen=True)
class Roster:
    members: PVector = attr.ib(
        validator=deep_iterable(
            member_validator=instance_of(Member), iterable_validator=instance_of(PVector)
        ),
        default=v(),
    )

    @members.validator
    def check(self, attribute, value: PVector):
        names = [m.name for m in value]
        if len(set(names)) != len(names):
            raise ConfigError(f"Duplicate member names in roster: {names}")
        addresses = [m.host for m in value]
        if len(set(addresses)) != len(addresses):
            raise ConfigError(f"Duplicate member addresses in roster: {addresses}")

    @classmethod
    def of(cls, members: Iterable[Member]) -> "Roster":
        return cls(members=pvector(members))

    def __iter__(self) -> Iterator[Member]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def others(self, me: Member) -> "Roster":
        """Every member but the one listening on `me.address`."""
        return Roster(members=pvector(m for m in self.members if m.host != me.host))

    def addresses(self) -> Set[str]:
        return {m.host for m in self.members}

    def require(self, me: Member):
        matches = [m for m in self.members if m.name == me.name]
        if not matches:
            raise ConfigError(f"{me} is not a member of the roster")
        if matches[0].host != me.host:
            raise ConfigError(
                f"{me} does not match roster entry {matches[0]}"
            )


def parse_member(value: str) -> Member:
    parts = value.split("=")
    if len(parts) != 2:
        raise ConfigError(f"{value!r} doesn't follow the name=address format")
    name, address = (part.strip() for part in parts)
    if not name or not address:
        raise ConfigError(f"{value!r} doesn't follow the name=address format")
    return Member(name=name, address=address)


def parse_members(value: str) -> Roster:
    if not value.strip():
        raise ConfigError("Roster must contain at least one member")
    return Roster.of(parse_member(part) for part in value.split(","))
