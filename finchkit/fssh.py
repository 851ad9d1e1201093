"""SSH connections restricted to loopback addresses."""

from __future__ import annotations

import io
import ipaddress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import paramiko

_KEY_CLASSES = (paramiko.RSAKey, paramiko.ECDSAKey, paramiko.Ed25519Key)


def _split_hostname(hostname: str) -> tuple[str, int | None]:
    """Split paramiko's ``[host]:port`` notation; plain hosts carry no port."""
    if hostname.startswith("[") and "]:" in hostname:
        host, _, port = hostname[1:].partition("]:")
        try:
            return host, int(port)
        except ValueError:
            return host, None
    return hostname, None


def _remote_address(client: Any, hostname: str) -> tuple[str, int | None]:
    get_transport = getattr(client, "get_transport", None)
    transport = get_transport() if get_transport is not None else None
    if transport is not None:
        try:
            peer = transport.getpeername()
        except (OSError, AttributeError):
            peer = None
        if peer:
            return str(peer[0]), int(peer[1])
    return _split_hostname(hostname)


def _format_address(ip: ipaddress.IPv4Address | ipaddress.IPv6Address, port: int | None) -> str:
    if port is None:
        return str(ip)
    if ip.version == 6:
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


class LoopbackOnlyPolicy(paramiko.MissingHostKeyPolicy):
    """Accepts unknown host keys only from loopback addresses."""

    def missing_host_key(self, client: Any, hostname: str, key: paramiko.PKey) -> None:
        host, port = _remote_address(client, hostname)
        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            raise paramiko.SSHException(
                "failed to convert the remote address to a TCP address"
            ) from None
        if not ip.is_loopback:
            raise paramiko.SSHException(
                "addresses that are not loopback addresses are not supported, "
                f"address: {_format_address(ip, port)}"
            )


@dataclass
class ClientConfig:
    """User, key and host-key policy used to open a connection."""

    user: str
    pkey: paramiko.PKey
    host_key_policy: paramiko.MissingHostKeyPolicy = field(default_factory=LoopbackOnlyPolicy)


class Dialer:
    """Opens SSH connections; kept as a class so it can be replaced in tests."""

    def dial(self, host: str, port: int, config: ClientConfig) -> paramiko.SSHClient:
        """Connect and authenticate, returning the connected client."""
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(config.host_key_policy)
        try:
            client.connect(
                host,
                port=port,
                username=config.user,
                pkey=config.pkey,
                allow_agent=False,
                look_for_keys=False,
            )
        except Exception:
            client.close()
            raise
        return client


def _parse_private_key(data: bytes) -> paramiko.PKey:
    text = data.decode("utf-8")
    last_error: Exception | None = None
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(text))
        except (paramiko.SSHException, ValueError) as err:
            last_error = err
    raise paramiko.SSHException(str(last_error) if last_error else "unsupported private key")


def new_client_config(user: str, private_key_path: str) -> ClientConfig:
    """Build a config that authenticates with the key file and only trusts loopback hosts."""
    try:
        data = Path(private_key_path).read_bytes()
    except OSError as err:
        raise OSError(f"failed to open private key file: {err}") from err
    try:
        pkey = _parse_private_key(data)
    except (paramiko.SSHException, ValueError) as err:
        raise paramiko.SSHException(
            f"failed to parse private key from {private_key_path}: {err}"
        ) from err
    return ClientConfig(user=user, pkey=pkey)