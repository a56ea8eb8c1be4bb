"""Local network helpers.

This module provides:
- list_local_ipv4: Enumerate non-loopback IPv4 addresses on every interface
- subnet_prefix: First three octets of an address
"""

from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

logger = logging.getLogger(__name__)

# Routable address used to select the primary interface; nothing is sent to it
_ROUTE_PROBE_ADDRESS = ("10.255.255.255", 1)


def _is_qualifying(address: str) -> bool:
    """Check if an address is a usable LAN IPv4 address."""
    try:
        ip = ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return not (ip.is_loopback or ip.is_link_local or ip.is_unspecified)


def _addresses_from_interfaces() -> set[str]:
    """Get the IPv4 addresses bound to every network interface."""
    addresses: set[str] = set()
    for name, entries in psutil.net_if_addrs().items():
        for entry in entries:
            if entry.family == socket.AF_INET:
                logger.debug(f"Interface {name}: {entry.address}")
                addresses.add(str(entry.address))
    return addresses


def _addresses_from_hostname() -> set[str]:
    """Get IPv4 addresses the host name resolves to."""
    infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    return {str(info[4][0]) for info in infos}


def _primary_address() -> str:
    """Get the address of the interface holding the default route.

    Connecting a UDP socket only selects a route; no packet is sent.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(_ROUTE_PROBE_ADDRESS)
        return str(s.getsockname()[0])
    finally:
        s.close()


def list_local_ipv4() -> set[str]:
    """List the non-internal IPv4 addresses bound to local interfaces.

    Every interface is enumerated. When that yields no usable address, the
    host name resolution and the default route address are used instead.
    An empty set (no network) is a valid result, not an error.

    Returns:
        Set of dotted-quad addresses.
    """
    try:
        addresses = {a for a in _addresses_from_interfaces() if _is_qualifying(a)}
    except (OSError, psutil.Error) as e:
        logger.debug(f"Interface enumeration failed: {e}")
        addresses = set()
    if addresses:
        return addresses

    candidates: set[str] = set()

    try:
        candidates |= _addresses_from_hostname()
    except OSError as e:
        logger.debug(f"Host name resolution failed: {e}")

    try:
        candidates.add(_primary_address())
    except OSError as e:
        logger.debug(f"No default route: {e}")

    return {a for a in candidates if _is_qualifying(a)}


def subnet_prefix(address: str) -> str:
    """Get the /24 prefix of an address (e.g. "192.168.1")."""
    return ".".join(address.split(".")[:3])
