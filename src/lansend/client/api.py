"""HTTP client for the LocalSend v2 API of a peer.

This module provides:
- DeviceClient: HTTP client bound to one receiving device
- Low-level POST helpers for JSON and raw byte bodies

LAN peers commonly serve self-signed certificates, so TLS verification
is disabled for every request.
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any

import httpx

from lansend.client.types import DeviceUnreachableError
from lansend.core.config import CONNECT_TIMEOUT, NEGOTIATE_TIMEOUT

if TYPE_CHECKING:
    from lansend.client.types import Device

logger = logging.getLogger(__name__)


def unbounded_timeout(connect: float = CONNECT_TIMEOUT) -> httpx.Timeout:
    """Build a timeout that only limits connection setup.

    Once an upload has started it may take as long as the link needs.

    Args:
        connect: Connect timeout in seconds.
    """
    return httpx.Timeout(None, connect=connect)


class DeviceClient:
    """HTTP client for a single LocalSend device."""

    def __init__(
        self,
        device: Device,
        timeout: float = NEGOTIATE_TIMEOUT,
    ) -> None:
        """Initialize the device client.

        Args:
            device: Target device.
            timeout: Default request timeout in seconds.
        """
        self._device = device
        self._timeout = timeout
        self._client = httpx.Client(
            base_url=device.base_url,
            timeout=timeout,
            verify=False,
        )

    @property
    def device(self) -> Device:
        """Get the target device."""
        return self._device

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> DeviceClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request, converting transport errors.

        Raises:
            DeviceUnreachableError: On connection failure or timeout.
        """
        try:
            response = self._client.post(path, **kwargs)
        except httpx.TimeoutException as e:
            raise DeviceUnreachableError(
                f"{self._device.alias} did not answer in time"
            ) from e
        except httpx.RequestError as e:
            raise DeviceUnreachableError(
                f"Could not reach {self._device.alias} at {self._device.ip}: {e}"
            ) from e
        logger.debug(f"POST {path} -> {response.status_code}")
        return response

    def post_json(
        self,
        path: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST a JSON body.

        Args:
            path: API path.
            payload: JSON-serializable body.
            params: Optional query parameters.

        Returns:
            The raw response (status codes are interpreted by the caller).
        """
        return self._post(path, json=payload, params=params)

    def post_content(
        self,
        path: str,
        content: bytes | IO[bytes] | None = None,
        params: dict[str, str] | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> httpx.Response:
        """POST a raw byte body (or no body).

        Args:
            path: API path.
            content: Bytes or a binary file object streamed as the body.
            params: Optional query parameters.
            timeout: Per-request timeout overriding the client default.

        Returns:
            The raw response.
        """
        kwargs: dict[str, Any] = {"params": params}
        if content is not None:
            kwargs["content"] = content
            kwargs["headers"] = {"Content-Type": "application/octet-stream"}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self._post(path, **kwargs)
