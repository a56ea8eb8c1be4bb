"""Caller-owned discovery state.

This module provides:
- DiscoveryCache: Last scan result, its timestamp and a scan-in-flight flag,
  guarded by one lock

The discovery engine itself keeps no state between scans. Hosts that
re-trigger discovery (retry actions, repeated queries) hold one
DiscoveryCache instead of module-level globals.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from lansend.client.discovery import DeviceRegistrar

if TYPE_CHECKING:
    from lansend.client.types import Device

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 30.0  # seconds


class DiscoveryCache:
    """Caches the last discovery result for a host application.

    Usage:
        cache = DiscoveryCache(DeviceRegistrar(config))
        devices = cache.get_devices()            # scans
        devices = cache.get_devices()            # cached while fresh
        devices = cache.get_devices(force=True)  # rescans
    """

    def __init__(
        self,
        registrar: DeviceRegistrar | None = None,
        max_age: float = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            registrar: Registrar used for scans.
            max_age: Seconds a result stays fresh.
            clock: Monotonic time source.
        """
        self._registrar = registrar or DeviceRegistrar()
        self._max_age = max_age
        self._clock = clock

        self._lock = threading.Lock()
        self._devices: list[Device] = []
        self._timestamp: float | None = None
        self._scan_in_flight = False

    @property
    def devices(self) -> list[Device]:
        """Get a copy of the cached devices."""
        with self._lock:
            return list(self._devices)

    @property
    def timestamp(self) -> float | None:
        """Get the clock value of the last completed scan."""
        with self._lock:
            return self._timestamp

    @property
    def scan_in_flight(self) -> bool:
        """Check if a scan is running."""
        with self._lock:
            return self._scan_in_flight

    def _is_fresh(self) -> bool:
        return (
            self._timestamp is not None
            and self._clock() - self._timestamp < self._max_age
        )

    def get_devices(
        self, force: bool = False, timeout: float | None = None
    ) -> list[Device]:
        """Get devices, scanning only when needed.

        While another scan is running the cached result is returned
        without starting a second scan.

        Args:
            force: Scan even if the cached result is fresh.
            timeout: Scan deadline in seconds.

        Returns:
            Discovered (or cached) devices.
        """
        with self._lock:
            if self._scan_in_flight:
                logger.debug("Scan already in flight, returning cached devices")
                return list(self._devices)
            if not force and self._is_fresh():
                return list(self._devices)
            self._scan_in_flight = True

        try:
            devices = self._registrar.discover(timeout)
        finally:
            with self._lock:
                self._scan_in_flight = False

        with self._lock:
            self._devices = list(devices)
            self._timestamp = self._clock()
        return list(devices)

    def invalidate(self) -> None:
        """Forget the cached result."""
        with self._lock:
            self._devices = []
            self._timestamp = None
