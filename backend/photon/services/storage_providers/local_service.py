import logging
import shutil
from urllib.parse import quote
from pathlib import Path
from typing import Dict, Any, List, Optional

from photon.core.exceptions import StorageError
from photon.services.storage_interface import UploadedContent, generate_unique_filename

logger = logging.getLogger(__name__)


class LocalStorageService:
    """
    Local filesystem storage provider.
    Implements StorageInterface. References are bare filenames under upload_dir.
    """

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for(self, reference: str) -> Path:
        try:
            path = (self.upload_dir / reference).resolve()
        except (OSError, ValueError, RuntimeError) as e:
            raise StorageError(f"Invalid reference {reference!r}: {e}", reference=reference) from e
        if path.parent != self.upload_dir.resolve():
            raise StorageError("Reference escapes the upload directory", reference=reference)
        return path

    def store(self, content: UploadedContent) -> str:
        filename = generate_unique_filename(content.filename)

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create upload directory {self.upload_dir}: {e}") from e

        path = self._path_for(filename)
        try:
            with open(path, "wb") as out:
                shutil.copyfileobj(content.stream, out)
        except (OSError, ValueError) as e:
            # Don't leave a half-written file behind
            self._remove_partial(path)
            raise StorageError(f"Failed to write {filename}: {e}", reference=filename) from e

        logger.info(f"Stored {filename} in {self.upload_dir}")
        return filename

    def _remove_partial(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove partial file {path}: {e}")

    def delete(self, reference: Optional[str]) -> None:
        if not reference:
            return
        path = self._path_for(reference)
        try:
            path.unlink(missing_ok=True)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to delete {reference}: {e}", reference=reference) from e
        logger.info(f"Deleted {reference} from {self.upload_dir}")

    def url_for(self, reference: str) -> str:
        return f"{self.url_prefix}/{quote(reference)}"

    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        if not self.upload_dir.is_dir():
            return []
        files = []
        for path in sorted(self.upload_dir.iterdir()):
            if not path.is_file() or not path.name.startswith(prefix):
                continue
            stat = path.stat()
            files.append({
                "file_id": path.name,
                "size": stat.st_size,
                "upload_timestamp": int(stat.st_mtime * 1000)
            })
        return files
