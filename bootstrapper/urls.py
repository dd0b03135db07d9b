import attr
from attr.validators import instance_of, optional
from string import Formatter
from typing import Optional
from yarl import URL

from bootstrapper.errors import ConfigError
from bootstrapper.etcd.protocol import ProtocolError

CLIENT_PORT = 2379
PEER_PORT = 2380


def _template(instance, attribute, value: Optional[str]):
    if value is None:
        return
    try:
        fields = {
            name for _, name, _, _ in Formatter().parse(value) if name is not None
        }
        url = URL(value.format(host="example.com"))
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigError(f"Invalid {attribute.name} template {value!r}") from e
    if fields != {"host"}:
        raise ConfigError(
            f"{attribute.name} template {value!r} must reference only {{host}}"
        )
    if not url.is_absolute():
        raise ConfigError(
            f"{attribute.name} template {value!r} does not render an absolute URL"
        )


@attr.s(frozen=True)
class UrlTemplates:
    """
    Derives a node's endpoints from its address.

    Templates use ``{host}`` as the address placeholder, for example
    ``https://{host}:2379``. Without a template the etcd port convention
    applies.
    """

    listen: Optional[str] = attr.ib(
        validator=[optional(instance_of(str)), _template], default=None
    )
    peer: Optional[str] = attr.ib(
        validator=[optional(instance_of(str)), _template], default=None
    )

    def listen_url(self, address: str) -> str:
        if self.listen is not None:
            return self.listen.format(host=address)
        return f"http://{address}:{CLIENT_PORT}"

    def peer_url(self, address: str) -> str:
        if self.peer is not None:
            return self.peer.format(host=address)
        return f"http://{address}:{PEER_PORT}"


def peer_host(peer_url: str) -> str:
    try:
        host = URL(peer_url).host
    except ValueError as e:
        raise ProtocolError(f"Invalid peer URL {peer_url!r}") from e
    if not host:
        raise ProtocolError(f"Peer URL {peer_url!r} has no host")
    return host.lower()
