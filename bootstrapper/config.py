"""
Options from the command line, falling back to the environment.

Every option ``--some-option`` may be given as ``--some_option`` or as
the environment variable ``ETCD2_BOOTSTRAPPER_SOME_OPTION``.
"""
import argparse
import attr
from attr.validators import instance_of
import logging
import os
import pydantic
from typing import Dict, Mapping, Optional, Sequence

from bootstrapper.dataclasses import dataclass
from bootstrapper.errors import ConfigError
from bootstrapper.etcd.client import DEFAULT_REQUEST_TIMEOUT
from bootstrapper.etcd.transport import Transport
from bootstrapper.member import Member, Roster, parse_member, parse_members
from bootstrapper.urls import UrlTemplates


CLI_NAME = "etcd2-bootstrapper"
ENV_PREFIX = "ETCD2_BOOTSTRAPPER_"
DEFAULT_OUT = "/etc/sysconfig/etcd-peers"


@dataclass
class Config:
    me: Optional[str] = None
    members: Optional[str] = None
    tmpl_listen_url: Optional[str] = None
    tmpl_peer_url: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    force: bool = False
    out: str = DEFAULT_OUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"


@attr.s(frozen=True)
class Settings:
    me: Member = attr.ib(validator=instance_of(Member))
    roster: Roster = attr.ib(validator=instance_of(Roster))
    urls: UrlTemplates = attr.ib(validator=instance_of(UrlTemplates))
    transport: Transport = attr.ib(validator=instance_of(Transport))
    force: bool = attr.ib(validator=instance_of(bool))
    out: str = attr.ib(validator=instance_of(str))


OPTIONS = {
    "me": "This member, as name=address.",
    "members": "Every cluster member, as name=address pairs separated by commas.",
    "tmpl-listen-url": "Client URL template, {host} is replaced by a member address.",
    "tmpl-peer-url": "Peer URL template, {host} is replaced by a member address.",
    "cert-file": "Identify HTTPS client using this SSL certificate file.",
    "key-file": "Identify HTTPS client using this SSL key file.",
    "ca-file": "Verify certificates of HTTPS-enabled servers using this CA bundle.",
    "out": "etcd peers environment file destination.",
    "request-timeout": "Seconds before a membership request is abandoned.",
    "log-level": "Logging level.",
}


def parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=CLI_NAME, description=f"{CLI_NAME} bootstraps an etcd2 cluster."
    )
    for name, help in OPTIONS.items():
        flags = [f"--{name}"]
        if "-" in name:
            flags.append(f"--{name.replace('-', '_')}")
        p.add_argument(*flags, dest=name.replace("-", "_"), default=None, help=help)
    p.add_argument(
        "--force",
        dest="force",
        action="store_const",
        const=True,
        default=None,
        help="Evict and re-add this member even if it is already listed.",
    )
    return p


def parse(
    argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> Config:
    environ = os.environ if environ is None else environ
    args = vars(parser().parse_args(argv))

    values: Dict[str, object] = {}
    for key, value in args.items():
        if value is None:
            value = environ.get(ENV_PREFIX + key.upper()) or None
        if value is not None:
            values[key] = value

    try:
        return Config(**values)
    except pydantic.ValidationError as e:
        raise ConfigError(str(e)) from e


def load(config: Config) -> Settings:
    """
    Resolve options into the values needed to bootstrap.

    Raises:
        ConfigError: An option is missing or invalid.
    """
    if not config.me:
        raise ConfigError("--me is a required parameter")
    if not config.members:
        raise ConfigError("--members is a required parameter")

    me = parse_member(config.me)
    roster = parse_members(config.members)
    roster.require(me)

    return Settings(
        me=me,
        roster=roster,
        urls=UrlTemplates(listen=config.tmpl_listen_url, peer=config.tmpl_peer_url),
        transport=Transport.from_files(
            config.cert_file,
            config.key_file,
            config.ca_file,
            timeout=config.request_timeout,
        ),
        force=config.force,
        out=config.out,
    )


def log_level(config: Config) -> int:
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {config.log_level}")
    return level
