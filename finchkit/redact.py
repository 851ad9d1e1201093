"""Removal of sensitive details from text included in support bundles."""

from __future__ import annotations

import re

_IPV4 = re.compile(r"(?:[0-9]{1,3}\.){3}[0-9]{1,3}(:[0-9]{1,5})?")
_IPV6 = re.compile(r"(?:[A-F0-9]{1,4}:){7}[A-F0-9]{1,4}")
_MAC = re.compile(r"([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})")

_SSH_KEYS = (
    re.compile(r"ecdsa-sha2-nistp256 .* root@lima-finch"),
    re.compile(r"ssh-ed25519 .* root@lima-finch"),
    re.compile(r"ssh-rsa .* root@lima-finch"),
)

# Only numbers in a known context are ports; arbitrary short numbers are left alone.
_PORTS = (
    (re.compile(r"('\[' -n )[0-9]{1,5}( ']')"), r"\1<port-elided>\2"),
    (re.compile(r"('\[' )[0-9]{1,5}( -ne 0 ']')"), r"\1<port-elided>\2"),
    (re.compile(r"(\[ssh -F .* -p )[0-9]{1,5}(.*])"), r"\1<port-elided>\2"),
    (re.compile(r'([{,]"sshLocalPort":)[0-9]{1,5}(})'), r"\1<port-elided>\2"),
    (re.compile(r"(port )[0-9]{1,5}"), r"\1<port-elided>"),
)


def redact_finch_install(content: str, finch: str) -> str:
    """Replace the installation location, treated as a pattern, with a placeholder."""
    return re.compile(str(finch)).sub("<finch-install-location-elided>", content)


def redact_username(content: str, username: str) -> str:
    """Replace the user name, treated as a pattern, with a placeholder."""
    return re.compile(username).sub("<username-elided>", content)


def redact_network_addresses(content: str) -> str:
    """Replace IPv4 (with optional port), IPv6 and MAC addresses."""
    redacted = _IPV4.sub("<ip-address-elided>", content)
    redacted = _IPV6.sub("<ip-address-elided>", redacted)
    return _MAC.sub("<mac-address-elided>", redacted)


def redact_ssh_keys(content: str) -> str:
    """Replace public host keys of the VM."""
    for pattern in _SSH_KEYS:
        content = pattern.sub("<key-elided>", content)
    return content


def redact_ports(content: str) -> str:
    """Replace port numbers where the surrounding text shows they are ports."""
    for pattern, replacement in _PORTS:
        content = pattern.sub(replacement, content)
    return content