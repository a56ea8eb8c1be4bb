"""Discovery of LocalSend peers on the local subnets.

This module provides:
- ProbeTarget: One (ip, port, protocol) candidate
- register_with_device: Send the self-announcement to one candidate
- DeviceRegistrar: Concurrent subnet scan bounded by a deadline
- find_devices: Convenience wrapper with logging
- dedupe_devices: Collapse per-protocol duplicates for callers

Usage:
    registrar = DeviceRegistrar(SenderConfig())
    devices = registrar.discover(timeout=3.0)
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import httpx

from lansend.client.network import list_local_ipv4, subnet_prefix
from lansend.client.types import Device, DeviceInfo
from lansend.core.config import DEFAULT_PORT, REGISTER_PATH, SenderConfig
from lansend.core.types import TransferProtocol

logger = logging.getLogger(__name__)

# Probe order per host
PROBE_PROTOCOLS = (TransferProtocol.HTTPS, TransferProtocol.HTTP)
HOST_SUFFIXES = range(1, 255)


@dataclass(frozen=True)
class ProbeTarget:
    """A candidate peer address."""

    ip: str
    port: int
    protocol: TransferProtocol

    def url(self, path: str) -> str:
        """Get the absolute URL of an API path on this target."""
        return f"{self.protocol.value}://{self.ip}:{self.port}{path}"


ProbeFunction = Callable[[httpx.Client, ProbeTarget, DeviceInfo], Device | None]


def build_probe_targets(
    local_ips: Iterable[str], port: int = DEFAULT_PORT
) -> list[ProbeTarget]:
    """Build every probe target for the /24 subnets of the local addresses.

    Local addresses themselves are skipped. Each remaining host gets one
    target per protocol in PROBE_PROTOCOLS.

    Args:
        local_ips: Addresses of this machine.
        port: Port to probe.

    Returns:
        List of targets (at most subnets x 254 x 2).
    """
    self_set = set(local_ips)
    prefixes = sorted({subnet_prefix(ip) for ip in self_set})

    targets: list[ProbeTarget] = []
    for prefix in prefixes:
        for suffix in HOST_SUFFIXES:
            ip = f"{prefix}.{suffix}"
            if ip in self_set:
                continue
            for protocol in PROBE_PROTOCOLS:
                targets.append(ProbeTarget(ip=ip, port=port, protocol=protocol))
    return targets


def register_with_device(
    client: httpx.Client, target: ProbeTarget, info: DeviceInfo
) -> Device | None:
    """Announce ourselves to a candidate and decode its reply.

    Any failure (connection error, timeout, non-200 status, malformed body)
    yields None.

    Args:
        client: HTTP client (TLS verification disabled, short timeout).
        target: Candidate to probe.
        info: Self-announcement to send.

    Returns:
        The responding device, or None.
    """
    try:
        response = client.post(target.url(REGISTER_PATH), json=info.to_dict())
        if response.status_code != 200:
            logger.debug(f"Probe {target.url('')} answered {response.status_code}")
            return None
        return Device.from_dict(response.json(), ip=target.ip, default_port=target.port)
    except httpx.HTTPError as e:
        logger.debug(f"Probe {target.url('')} failed: {e}")
    except ValueError as e:
        logger.debug(f"Probe {target.url('')} returned no peer: {e}")
    return None


class _ResultCollector:
    """Thread-safe device list that stops accepting results once closed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._devices: list[Device] = []
        self._closed = False

    def add(self, device: Device) -> bool:
        """Add a device unless the collector is closed.

        Returns:
            True if the device was kept.
        """
        with self._lock:
            if self._closed:
                return False
            self._devices.append(device)
            return True

    def close(self) -> list[Device]:
        """Stop accepting results and return a snapshot."""
        with self._lock:
            self._closed = True
            return list(self._devices)


class DeviceRegistrar:
    """Concurrent subnet scanner for LocalSend peers.

    Probes are executed by a bounded pool of worker threads, each owning its
    own HTTP client. The scan returns when every probe has settled or when
    the deadline expires, whichever comes first. Probes still running at the
    deadline are abandoned and their results discarded.
    """

    def __init__(
        self,
        config: SenderConfig | None = None,
        local_ips: Callable[[], set[str]] = list_local_ipv4,
        probe: ProbeFunction = register_with_device,
    ) -> None:
        """Initialize the registrar.

        Args:
            config: Sender configuration (timeouts, port, pool size).
            local_ips: Function enumerating local IPv4 addresses.
            probe: Function probing one target.
        """
        self._config = config or SenderConfig()
        self._local_ips = local_ips
        self._probe = probe

    def _make_client(self) -> httpx.Client:
        return httpx.Client(verify=False, timeout=self._config.probe_timeout)

    def discover(self, timeout: float | None = None) -> list[Device]:
        """Scan the local subnets for peers.

        Never raises; finding nothing yields an empty list.

        Args:
            timeout: Overall deadline in seconds (config.scan_timeout if None).

        Returns:
            Devices that answered before the deadline, in arbitrary order.
            The same IP may appear once per protocol.
        """
        deadline = self._config.scan_timeout if timeout is None else timeout

        targets = build_probe_targets(self._local_ips(), self._config.port)
        if not targets:
            logger.info("No local IPv4 address found, nothing to scan")
            return []

        tasks: queue.Queue[ProbeTarget] = queue.Queue()
        for target in targets:
            tasks.put(target)

        collector = _ResultCollector()
        stop_event = threading.Event()
        finished = threading.Event()
        worker_count = min(self._config.max_workers, len(targets))
        remaining = [worker_count]  # Use list to allow mutation in closure
        remaining_lock = threading.Lock()

        def worker_loop() -> None:
            try:
                with self._make_client() as client:
                    while not stop_event.is_set():
                        try:
                            target = tasks.get_nowait()
                        except queue.Empty:
                            break

                        info = DeviceInfo.local(self._config)
                        try:
                            device = self._probe(client, target, info)
                        except Exception:
                            logger.exception(f"Unexpected error probing {target.ip}")
                            continue

                        if device is not None and collector.add(device):
                            logger.debug(
                                f"Found {device.alias} at {device.ip} ({device.protocol.value})"
                            )
            finally:
                with remaining_lock:
                    remaining[0] -= 1
                    if remaining[0] == 0:
                        finished.set()

        logger.debug(
            f"Probing {len(targets)} targets with {worker_count} workers "
            f"(deadline {deadline}s)"
        )
        for i in range(worker_count):
            thread = threading.Thread(
                target=worker_loop,
                name=f"DeviceRegistrar-{i}",
                daemon=True,
            )
            thread.start()

        if finished.wait(timeout=deadline):
            logger.debug("All probes settled before the deadline")
        else:
            logger.debug("Discovery deadline reached, abandoning pending probes")

        stop_event.set()
        return collector.close()


def find_devices(
    config: SenderConfig | None = None, timeout: float | None = None
) -> list[Device]:
    """Discover peers with a default registrar.

    Args:
        config: Sender configuration.
        timeout: Overall deadline in seconds.

    Returns:
        Discovered devices (possibly with per-protocol duplicates).
    """
    logger.info("Scanning network for devices...")
    devices = DeviceRegistrar(config).discover(timeout)
    logger.info(f"Network scan found {len(devices)} device(s)")
    return devices


def dedupe_devices(devices: Iterable[Device]) -> list[Device]:
    """Keep one entry per fingerprint, preferring HTTPS.

    Order of first appearance is preserved.
    """
    by_fingerprint: dict[str, Device] = {}
    for device in devices:
        existing = by_fingerprint.get(device.fingerprint)
        if existing is None or (
            existing.protocol != TransferProtocol.HTTPS
            and device.protocol == TransferProtocol.HTTPS
        ):
            by_fingerprint[device.fingerprint] = device
    return list(by_fingerprint.values())
