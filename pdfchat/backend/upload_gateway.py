"""Upload gateway: hands a file to the AI backend and waits until it is usable.

The only retry in the backend layer is the status poll below; the upload
itself is never retried.
"""

import logging
import time

from pdfchat.backend.base import RemoteFile, StorageBackend
from pdfchat.backend.config import PollPolicy
from pdfchat.cancellation import CancellationToken
from pdfchat.errors import BackendError, UploadError, UploadErrorKind
from pdfchat.models.transcript import FileReference, ProcessingState
from pdfchat.parsing.pdf_parser import PDF_MIME_TYPE

logger = logging.getLogger(__name__)


def _to_reference(remote: RemoteFile, display_name: str) -> FileReference:
    return FileReference(
        handle=remote.handle,
        uri=remote.uri,
        mime_type=remote.mime_type,
        processing_state=remote.state,
        display_name=display_name,
    )


class UploadGateway:
    """Uploads files to backend storage and polls them to a terminal state."""

    def __init__(self, storage: StorageBackend, policy: PollPolicy | None = None) -> None:
        self._storage = storage
        self._policy = policy or PollPolicy()

    async def upload(
        self,
        data: bytes,
        display_name: str,
        mime_type: str = PDF_MIME_TYPE,
        token: CancellationToken | None = None,
    ) -> FileReference:
        """Upload ``data`` and wait until the backend reports it ready.

        Args:
            data: Raw file bytes, already validated by the caller.
            display_name: Name shown by the backend for the file.
            mime_type: MIME type of the file.
            token: Optional cancellation token honored at every suspension point.

        Returns:
            FileReference in state READY.

        Raises:
            UploadError: TRANSPORT on a failed remote call, PROCESSING_FAILED
                when the backend rejects the file or polling gives up.
            OperationCancelled: If ``token`` fires.
        """
        token = token or CancellationToken()

        try:
            remote = await token.guard(self._storage.upload(data, display_name, mime_type))
        except BackendError as e:
            logger.error(f"Upload of {display_name} failed: {e}")
            raise UploadError(UploadErrorKind.TRANSPORT, "transport") from e

        logger.info(f"Uploaded {display_name} as {remote.handle} ({remote.state.value})")
        remote = await self._poll(remote, token)
        return self._finish(remote, display_name)

    async def _poll(self, remote: RemoteFile, token: CancellationToken) -> RemoteFile:
        deadline = time.monotonic() + self._policy.timeout_s
        attempt = 0
        for delay in self._policy.delays():
            if remote.state is not ProcessingState.PENDING:
                return remote
            if time.monotonic() + delay > deadline:
                break
            await token.sleep(delay)
            attempt += 1
            try:
                remote = await token.guard(self._storage.get(remote.handle))
            except BackendError as e:
                logger.error(f"Status check {attempt} for {remote.handle} failed: {e}")
                raise UploadError(UploadErrorKind.TRANSPORT, "transport") from e
            logger.debug(f"Status check {attempt} for {remote.handle}: {remote.state.value}")

        if remote.state is not ProcessingState.PENDING:
            return remote
        logger.warning(f"Gave up on {remote.handle} after {attempt} status checks")
        raise UploadError(UploadErrorKind.PROCESSING_FAILED, "processing timed out")

    def _finish(self, remote: RemoteFile, display_name: str) -> FileReference:
        if remote.state is ProcessingState.FAILED:
            logger.warning(f"Backend failed to process {remote.handle}")
            raise UploadError(UploadErrorKind.PROCESSING_FAILED, "processing failed")
        logger.info(f"File {remote.handle} is ready")
        return _to_reference(remote, display_name)
