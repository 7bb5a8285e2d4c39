"""
Local persistence for feed artifacts.

The status document, the raw and compressed snapshot, the clean snapshot
and the JSON aggregate are all plain files. Their modification times are
what the freshness gate measures against.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError


class FileStorage:
    """
    File-backed persistence capability.

    Missing files are reported as None rather than raised; any other OS
    failure is wrapped in PersistenceError.
    """

    def read_bytes(self, path: Path) -> Optional[bytes]:
        """
        Read a persisted artifact.

        Args:
            path: Path to the artifact

        Returns:
            File content, or None if the file does not exist

        Raises:
            PersistenceError: If the file exists but cannot be read
        """
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read {path}: {e}",
                details={"file_path": str(path)},
            )

    def write_bytes(self, path: Path, data: bytes) -> None:
        """
        Write an artifact, replacing any previous content.

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write {path}: {e}",
                details={"file_path": str(path)},
            )

    def last_modified(self, path: Path) -> Optional[datetime]:
        """Get the modification time as an aware UTC datetime, or None."""
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to stat {path}: {e}",
                details={"file_path": str(path)},
            )
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def delete(self, path: Path) -> None:
        """Remove an artifact if present."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to delete {path}: {e}",
                details={"file_path": str(path)},
            )
