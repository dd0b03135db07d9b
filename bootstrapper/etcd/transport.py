import attr
from attr.validators import instance_of, optional
import ssl
from typing import Optional

from bootstrapper.errors import ConfigError
from bootstrapper.etcd.client import DEFAULT_REQUEST_TIMEOUT, Client


@attr.s(frozen=True)
class Transport:
    """
    Creates membership clients for cluster endpoints.

    Chosen once from configuration, either plain HTTP or TLS
    with client certificate authentication.
    """

    ssl_context: Optional[ssl.SSLContext] = attr.ib(
        validator=optional(instance_of(ssl.SSLContext)), default=None
    )
    timeout: float = attr.ib(converter=float, default=DEFAULT_REQUEST_TIMEOUT)

    @timeout.validator
    def check(self, attribute, value: float):
        if value <= 0:
            raise ConfigError(f"Request timeout must be positive, got {value}")

    @classmethod
    def plain(cls, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> "Transport":
        return cls(timeout=timeout)

    @classmethod
    def tls(
        cls,
        cert_file: str,
        key_file: str,
        ca_file: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> "Transport":
        try:
            context = ssl.create_default_context(cafile=ca_file)
            context.load_cert_chain(certfile=cert_file, keyfile=key_file)
        except (OSError, ssl.SSLError) as e:
            raise ConfigError(f"Unable to load TLS material: {e}") from e
        return cls(ssl_context=context, timeout=timeout)

    @classmethod
    def from_files(
        cls,
        cert_file: Optional[str],
        key_file: Optional[str],
        ca_file: Optional[str],
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> "Transport":
        files = (cert_file, key_file, ca_file)
        if all(files):
            return cls.tls(cert_file, key_file, ca_file, timeout=timeout)
        if any(files):
            raise ConfigError(
                "cert-file, key-file and ca-file must be given together"
            )
        return cls.plain(timeout=timeout)

    @property
    def secure(self) -> bool:
        return self.ssl_context is not None

    def __call__(self, endpoint: str) -> Client:
        return Client(endpoint, ssl_context=self.ssl_context, timeout=self.timeout)
