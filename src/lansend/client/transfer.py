"""Sending files to a LocalSend receiver.

This module provides:
- TransferNegotiator: prepare-upload handshake and status code mapping
- FileUploader: Sequential per-file upload and best-effort cancel
- Transfer: One transfer attempt with its state machine
- send_files: Catalog, negotiate and upload in one call

The receiver tracks a single active session, so callers must not run
concurrent transfers to the same device.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from lansend.client.api import DeviceClient, unbounded_timeout
from lansend.client.catalog import describe_all
from lansend.client.types import (
    Device,
    DeviceInfo,
    DeviceUnreachableError,
    FileDescriptor,
    LocalIOError,
    MissingTokenError,
    ProgressCallback,
    TransferCancelledError,
    TransferError,
    TransferRejectedError,
    TransferSession,
    UploadFailedError,
    UploadProgress,
)
from lansend.core.config import (
    CANCEL_PATH,
    PREPARE_UPLOAD_PATH,
    UPLOAD_PATH,
    SenderConfig,
)
from lansend.core.types import TransferState

logger = logging.getLogger(__name__)

# prepare-upload status codes
REJECTION_REASONS: dict[int, str] = {
    400: "Invalid request",
    401: "PIN required",
    403: "Request rejected by receiver",
    409: "Receiver is busy with another transfer",
    429: "Too many requests",
    500: "Receiver error",
}
DEFAULT_REJECTION_REASON = "Upload rejected"

UPLOAD_SUCCESS_CODES = frozenset({200, 204})


class TransferNegotiator:
    """Performs the prepare-upload handshake with a receiver."""

    def __init__(self, config: SenderConfig | None = None) -> None:
        """Initialize the negotiator.

        Args:
            config: Sender configuration (alias, negotiation timeout).
        """
        self._config = config or SenderConfig()

    def negotiate(
        self, device: Device, files: Sequence[FileDescriptor]
    ) -> TransferSession:
        """Offer files to a device and obtain upload tokens.

        The receiver may wait for a human to accept, hence the long timeout.

        Args:
            device: Receiving device.
            files: Files to offer.

        Returns:
            Session with one token per accepted file, or the empty sentinel
            session when the receiver needs no upload (204).

        Raises:
            TransferRejectedError: If the receiver refused or answered garbage.
            DeviceUnreachableError: If the receiver could not be reached.
        """
        payload = {
            "info": DeviceInfo.local(self._config).to_sender_dict(),
            "files": {f.id: f.to_dict() for f in files},
        }

        logger.info(f"Requesting upload of {len(files)} file(s) to {device.alias}")
        with DeviceClient(device, timeout=self._config.negotiate_timeout) as client:
            response = client.post_json(PREPARE_UPLOAD_PATH, payload)

        if response.status_code == 204:
            logger.info(f"{device.alias} needs no upload")
            return TransferSession.empty()

        if response.status_code != 200:
            reason = REJECTION_REASONS.get(response.status_code, DEFAULT_REJECTION_REASON)
            logger.warning(
                f"{device.alias} rejected upload ({response.status_code}): {reason}"
            )
            raise TransferRejectedError(reason, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransferRejectedError("Invalid response from receiver", 200) from e
        return TransferSession.from_dict(data)


class FileUploader:
    """Uploads files of a negotiated session, one at a time and in order."""

    def __init__(self, config: SenderConfig | None = None) -> None:
        """Initialize the uploader.

        Args:
            config: Sender configuration (connect timeout).
        """
        self._config = config or SenderConfig()

    def upload(
        self,
        device: Device,
        session: TransferSession,
        files: Sequence[FileDescriptor],
        on_progress: ProgressCallback | None = None,
        cancel_check: Callable[[], bool] | None = None,
    ) -> None:
        """Upload every file of a session.

        Progress is reported before each file and once more on completion
        with current_index == total_count. The first failure aborts the
        remaining files.

        Args:
            device: Receiving device.
            session: Session returned by negotiation.
            files: Files in upload order.
            on_progress: Optional progress callback.
            cancel_check: Optional function returning True to stop before
                the next file.

        Raises:
            MissingTokenError: If the session has no token for a file.
            UploadFailedError: If the receiver refuses a file.
            TransferCancelledError: If cancel_check asked to stop.
            DeviceUnreachableError: If the receiver could not be reached.
            LocalIOError: If a file can no longer be opened.
        """
        if not session.requires_upload:
            logger.info("Empty session, skipping upload")
            return

        total = len(files)
        with DeviceClient(device, timeout=self._config.negotiate_timeout) as client:
            for index, file in enumerate(files):
                if cancel_check and cancel_check():
                    logger.info(f"Upload cancelled at file {index + 1}/{total}")
                    raise TransferCancelledError(
                        f"Transfer to {device.alias} cancelled at file {index + 1}/{total}"
                    )

                if on_progress:
                    on_progress(UploadProgress(index, total, file.file_name))

                self._upload_file(client, session, file)
                logger.debug(f"Uploaded {file.file_name} ({file.size} bytes)")

        if on_progress:
            on_progress(UploadProgress(total, total, ""))

    def _upload_file(
        self, client: DeviceClient, session: TransferSession, file: FileDescriptor
    ) -> None:
        """Upload one file, streaming its content from disk."""
        token = session.token_for(file.id)
        if token is None:
            raise MissingTokenError(file.file_name)

        params = {
            "sessionId": session.session_id,
            "fileId": file.id,
            "token": token,
        }

        try:
            handle = open(file.path, "rb")
        except OSError as e:
            raise LocalIOError(f"Cannot read {file.path}: {e}") from e

        with handle:
            response = client.post_content(
                UPLOAD_PATH,
                content=handle,
                params=params,
                timeout=unbounded_timeout(self._config.connect_timeout),
            )

        if response.status_code not in UPLOAD_SUCCESS_CODES:
            raise UploadFailedError(response.status_code, response.text)

    def cancel(self, device: Device, session_id: str) -> bool:
        """Ask the receiver to drop a session.

        Best effort: failures are logged and never raised.

        Args:
            device: Receiving device.
            session_id: Session to cancel.

        Returns:
            True if the receiver acknowledged the cancellation.
        """
        try:
            with DeviceClient(device, timeout=self._config.connect_timeout) as client:
                response = client.post_content(
                    CANCEL_PATH, params={"sessionId": session_id}
                )
        except DeviceUnreachableError as e:
            logger.warning(f"Cancel request to {device.alias} failed: {e}")
            return False

        if response.status_code not in UPLOAD_SUCCESS_CODES:
            logger.warning(
                f"{device.alias} answered cancel with status {response.status_code}"
            )
            return False
        return True


class Transfer:
    """One attempt to send a list of files to a device.

    A Transfer is single-use: build a new one to retry.

    Usage:
        transfer = Transfer(device, ["a.txt", "b.png"])
        state = transfer.run(on_progress=print)

        # From another thread
        transfer.cancel()
    """

    def __init__(
        self,
        device: Device,
        paths: Sequence[Path | str],
        config: SenderConfig | None = None,
        negotiator: TransferNegotiator | None = None,
        uploader: FileUploader | None = None,
    ) -> None:
        """Initialize the transfer.

        Args:
            device: Receiving device.
            paths: Regular files to send, in order.
            config: Sender configuration.
            negotiator: Negotiator to use (built from config if None).
            uploader: Uploader to use (built from config if None).
        """
        self._device = device
        self._paths = [Path(p) for p in paths]
        config = config or SenderConfig()
        self._negotiator = negotiator or TransferNegotiator(config)
        self._uploader = uploader or FileUploader(config)

        self._lock = threading.Lock()
        self._state = TransferState.IDLE
        self._session: TransferSession | None = None
        self._cancel_requested = False
        self._started = False
        self._cancel_sent = False

    @property
    def state(self) -> TransferState:
        """Get current transfer state."""
        return self._state

    @property
    def session(self) -> TransferSession | None:
        """Get the negotiated session, if any."""
        return self._session

    @property
    def cancel_requested(self) -> bool:
        """Check if cancellation was requested."""
        return self._cancel_requested

    def _request_receiver_cancel(self, session_id: str) -> None:
        """Ask the receiver to drop the session, at most once."""
        with self._lock:
            if self._cancel_sent:
                return
            self._cancel_sent = True
        self._uploader.cancel(self._device, session_id)

    def _set_state(self, state: TransferState) -> None:
        with self._lock:
            logger.debug(f"Transfer to {self._device.alias}: {self._state.name} -> {state.name}")
            self._state = state

    def run(self, on_progress: ProgressCallback | None = None) -> TransferState:
        """Catalog, negotiate and upload.

        Every file is cataloged before the first network request.

        Args:
            on_progress: Optional progress callback.

        Returns:
            NO_TRANSFER_NEEDED or COMPLETED.

        Raises:
            TransferCancelledError: If cancel() was called during the upload.
            TransferError: Any other transfer failure (state becomes FAILED).
            RuntimeError: If the transfer was already run.
        """
        with self._lock:
            if self._started:
                raise RuntimeError("Transfer already started")
            self._started = True

        logger.info(f"Sending {len(self._paths)} file(s) to {self._device.alias}")

        try:
            files = describe_all(self._paths)

            self._set_state(TransferState.NEGOTIATING)
            session = self._negotiator.negotiate(self._device, files)
            with self._lock:
                self._session = session

            if not session.requires_upload:
                self._set_state(TransferState.NO_TRANSFER_NEEDED)
                return self._state

            self._set_state(TransferState.UPLOADING)
            if self._cancel_requested:
                self._request_receiver_cancel(session.session_id)
                raise TransferCancelledError(f"Transfer to {self._device.alias} cancelled")

            self._uploader.upload(
                self._device,
                session,
                files,
                on_progress=on_progress,
                cancel_check=lambda: self._cancel_requested,
            )

        except TransferCancelledError:
            self._set_state(TransferState.CANCELLED)
            raise

        except TransferError as e:
            if self._cancel_requested and self._state == TransferState.UPLOADING:
                self._set_state(TransferState.CANCELLED)
                raise TransferCancelledError(
                    f"Transfer to {self._device.alias} cancelled"
                ) from e
            self._set_state(TransferState.FAILED)
            logger.error(f"Transfer to {self._device.alias} failed: {e}")
            raise

        self._set_state(TransferState.COMPLETED)
        logger.info(f"Sent {len(files)} file(s) to {self._device.alias}")
        return self._state

    def cancel(self) -> bool:
        """Request cancellation of the transfer.

        The current file is not interrupted locally; the receiver is asked
        to drop the session, and no further file is started.

        Returns:
            True if cancellation was requested, False if already finished.
        """
        with self._lock:
            if self._state.is_terminal:
                return False
            self._cancel_requested = True
            state = self._state
            session = self._session

        logger.info(f"Cancellation requested for transfer to {self._device.alias}")
        if state == TransferState.UPLOADING and session and session.requires_upload:
            self._request_receiver_cancel(session.session_id)
        return True


def send_files(
    device: Device,
    paths: Sequence[Path | str],
    on_progress: ProgressCallback | None = None,
    config: SenderConfig | None = None,
) -> TransferState:
    """Send files to a device.

    Args:
        device: Receiving device.
        paths: Regular files to send, in order.
        on_progress: Optional progress callback.
        config: Sender configuration.

    Returns:
        NO_TRANSFER_NEEDED or COMPLETED.

    Raises:
        TransferError: If cataloging, negotiation or an upload fails.
    """
    return Transfer(device, paths, config=config).run(on_progress=on_progress)
