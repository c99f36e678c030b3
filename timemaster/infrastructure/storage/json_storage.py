"""JSON file storage with Result-based error handling.

Provides a thin wrapper around file I/O operations for JSON data,
returning Result types instead of raising exceptions. Writes go to a
temporary file in the target directory which is then renamed over the
destination, so a reader sees either the old document or the new one.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from timemaster.domain.shared.result import Err, Ok, Result


class JsonStorage:
    """Low-level JSON file I/O with Result-based error handling.

    This class wraps basic JSON operations (load/save/delete) and returns
    Result types for explicit error handling. It does not contain any
    domain logic - just file I/O.

    Example:
        storage = JsonStorage()
        result = storage.load_json(Path("task.json"))
        if isinstance(result, Ok):
            data = result.value
        else:
            print(f"Error: {result.error}")
    """

    def __init__(self, fsync: bool = True) -> None:
        """Initialize the storage.

        Args:
            fsync: Flush file contents to disk before the rename.
        """
        self._fsync = fsync

    def load_json(self, path: Path) -> Result[Any, str]:
        """Load JSON data from a file.

        Args:
            path: Path to the JSON file to read.

        Returns:
            Ok(data) if successful, Err(str) with error message if failed.
        """
        try:
            if not path.exists():
                return Err(f"File not found: {path}")

            content = path.read_text(encoding="utf-8")
            return Ok(json.loads(content))

        except json.JSONDecodeError as e:
            return Err(f"Invalid JSON in {path}: {e}")
        except PermissionError:
            return Err(f"Permission denied reading {path}")
        except OSError as e:
            return Err(f"Error reading {path}: {e}")

    def save_json(
        self,
        path: Path,
        data: Any,
        indent: int = 2,
    ) -> Result[None, str]:
        """Atomically save JSON data to a file.

        Args:
            path: Path to the JSON file to write.
            data: JSON-serializable value.
            indent: JSON indentation level (default 2).

        Returns:
            Ok(None) if successful, Err(str) with error message if failed.
        """
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            content = json.dumps(data, indent=indent, ensure_ascii=False)

            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(content)
                fh.flush()
                if self._fsync:
                    os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
            return Ok(None)

        except TypeError as e:
            return Err(f"Data not JSON serializable: {e}")
        except PermissionError:
            return Err(f"Permission denied writing {path}")
        except OSError as e:
            return Err(f"Error writing {path}: {e}")
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def delete_json(self, path: Path) -> Result[bool, str]:
        """Delete a JSON file.

        Returns:
            Ok(True) if a file was removed, Ok(False) if there was none,
            Err(str) if removal failed.
        """
        try:
            path.unlink()
            return Ok(True)
        except FileNotFoundError:
            return Ok(False)
        except PermissionError:
            return Err(f"Permission denied deleting {path}")
        except OSError as e:
            return Err(f"Error deleting {path}: {e}")

    def list_json(self, directory: Path) -> Result[list[Path], str]:
        """List the JSON documents in a directory (not recursive)."""
        try:
            if not directory.exists():
                return Ok([])
            return Ok(sorted(p for p in directory.glob("*.json") if p.is_file()))
        except PermissionError:
            return Err(f"Permission denied accessing {directory}")
        except OSError as e:
            return Err(f"Error listing {directory}: {e}")
