import enum
import io
import logging
import os
import shutil
import tempfile
import uuid
from typing import Protocol, Dict, Optional, Any, List, BinaryIO, NamedTuple

from pydantic import BaseModel

from photon.core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Unsized uploads are buffered in memory up to this, then on disk
SPOOL_MAX_MEMORY = 8 * 1024 * 1024


class UploadedContent(NamedTuple):
    """Raw upload handed to a storage provider."""
    stream: BinaryIO
    filename: str
    content_type: str = "application/octet-stream"
    size: Optional[int] = None

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, content_type: str = "application/octet-stream") -> "UploadedContent":
        return cls(io.BytesIO(data), filename, content_type, len(data))

    def seekable(self) -> bool:
        try:
            return self.stream.seekable()
        except (AttributeError, ValueError):
            return False

    def byte_size(self) -> Optional[int]:
        """
        Size hint if given, otherwise measured from the stream without consuming it.
        None when neither is possible (pipes, sockets); see spool_content.
        """
        if self.size is not None:
            return self.size
        if not self.seekable():
            return None
        position = self.stream.tell()
        self.stream.seek(0, os.SEEK_END)
        end = self.stream.tell()
        self.stream.seek(position)
        return end - position

    def is_empty(self) -> bool:
        return self.byte_size() == 0


def spool_content(content: UploadedContent) -> UploadedContent:
    """
    Copy an unsized, non-seekable upload into a temporary file so its size is known.
    The caller owns the returned stream and must close it.
    """
    buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY)
    try:
        shutil.copyfileobj(content.stream, buffer)
    except (OSError, ValueError) as e:
        buffer.close()
        raise StorageError(f"Failed to read upload {content.filename}: {e}") from e
    size = buffer.tell()
    buffer.seek(0)
    return content._replace(stream=buffer, size=size)


class StorageInterface(Protocol):
    """
    Interface for storage providers (local filesystem, S3).
    Exactly one provider is active per deployment; see storage_factory.
    """

    def store(self, content: UploadedContent) -> str:
        """
        Persist content under a freshly generated unique name.
        Returns the reference to save in image metadata.
        Raises StorageError if the bytes could not be written.
        """
        ...

    def delete(self, reference: Optional[str]) -> None:
        """
        Delete the object at reference.
        Empty reference or an already missing object is a no-op.
        Raises StorageError on any other failure.
        """
        ...

    def url_for(self, reference: str) -> str:
        """URL a client can use to fetch the object."""
        ...

    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        """List stored objects as dicts with file_id (the reference) and size."""
        ...


def generate_unique_filename(original_filename: Optional[str]) -> str:
    """Random token + caller's basename, so concurrent uploads never share a name."""
    name = os.path.basename((original_filename or "").replace("\\", "/")).strip()
    return f"{uuid.uuid4()}_{name or 'upload'}"


class DeleteOutcome(str, enum.Enum):
    DELETED = "deleted"
    SKIPPED = "skipped"  # nothing to delete
    FAILED = "failed"    # backend error, absorbed


class DeleteResult(BaseModel):
    """Result of a best-effort cleanup delete. Never raised, always returned."""
    reference: Optional[str] = None
    outcome: DeleteOutcome
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome != DeleteOutcome.FAILED


def discard_file(storage: StorageInterface, reference: Optional[str]) -> DeleteResult:
    """
    Delete stored bytes that metadata no longer (or soon won't) reference.

    Storage failures are logged and reported in the result instead of raised,
    so the containing metadata operation always goes ahead.
    """
    if not reference:
        return DeleteResult(reference=reference, outcome=DeleteOutcome.SKIPPED)
    try:
        storage.delete(reference)
    except StorageError as e:
        logger.warning(f"Failed to delete stored file {reference}: {e}")
        return DeleteResult(reference=reference, outcome=DeleteOutcome.FAILED, error=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error deleting stored file {reference}")
        return DeleteResult(reference=reference, outcome=DeleteOutcome.FAILED, error=str(e))
    return DeleteResult(reference=reference, outcome=DeleteOutcome.DELETED)
