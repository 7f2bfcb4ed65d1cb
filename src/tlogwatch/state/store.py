"""
Persisted tree state.

The last trusted TreeState is the only durable state tlogwatch keeps.
It is stored as a small JSON record:

    {"Size": 1234, "Hash": "<base64 root hash>"}

Rules:
- A missing file means "no prior state" (bootstrap); nothing else does
- Unreadable or corrupt files raise, so a disk fault can never
  downgrade a run to trust-on-first-use
- Saves are atomic: temp file, fsync, rename over the old record
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tlogwatch.protocol.errors import PersistError, StateDecodeError, StateReadError
from tlogwatch.protocol.models import TreeState
from tlogwatch.utils.encoding import b64decode, b64encode
from tlogwatch.utils.json import json_dumps, json_loads

DEFAULT_STATE_DIR = "~/.tlogwatch"
DEFAULT_STATE_FILE = "state.json"

STATE_FILE_MODE = 0o600
STATE_DIR_MODE = 0o755


def default_state_path() -> Path:
    return Path(DEFAULT_STATE_DIR).expanduser() / DEFAULT_STATE_FILE


def encode_state(state: TreeState) -> Dict[str, Any]:
    return {
        "Size": state.size,
        "Hash": b64encode(state.root_hash),
    }


def decode_state(data: Any) -> TreeState:
    """
    Decode a persisted record.

    Raises:
        StateDecodeError: If the record is not a valid TreeState
    """
    if not isinstance(data, dict):
        raise StateDecodeError(f"state record must be an object, got {type(data).__name__}")

    for name in ("Size", "Hash"):
        if name not in data:
            raise StateDecodeError(f"state record missing field {name!r}")

    size = data["Size"]
    if isinstance(size, bool) or not isinstance(size, int):
        raise StateDecodeError(f"state field 'Size' must be an integer, got {size!r}")

    try:
        root_hash = b64decode(data["Hash"])
        return TreeState(size=size, root_hash=root_hash)
    except ValueError as e:
        raise StateDecodeError(f"invalid state record: {e}") from e


class StateStore:
    """
    File-backed store for the last trusted tree state.

    Not safe for concurrent runs against the same path; callers run at
    most one update per state file at a time.

    The parent directory is created on the first save; a load from a
    missing directory is "no state".
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._path = Path(path).expanduser() if path else default_state_path()
        self._log = logger or logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Optional[TreeState]:
        """
        Load the last trusted state.

        Returns:
            The persisted TreeState, or None if no record exists

        Raises:
            StateReadError: The record exists but could not be read
            StateDecodeError: The record was read but is corrupt
        """
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            self._log.info("No previous state found at: %s", self._path)
            return None
        except OSError as e:
            raise StateReadError(f"cannot read state file {self._path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StateDecodeError(f"state file {self._path} is not UTF-8: {e}") from e

        try:
            data = json_loads(raw)
        except ValueError as e:
            raise StateDecodeError(f"state file {self._path} is not valid JSON: {e}") from e

        state = decode_state(data)
        self._log.debug("Loaded state size=%d from %s", state.size, self._path)
        return state

    def save(self, state: TreeState) -> None:
        """
        Atomically replace the persisted record.

        Raises:
            PersistError: The record could not be written; the previous
                record (if any) is left untouched
        """
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._ensure_dir()
            fd = os.open(str(tmp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, STATE_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json_dumps(encode_state(state)))
                f.flush()
                os.fsync(f.fileno())
            # Atomic rename
            os.replace(str(tmp_path), str(self._path))
        except OSError as e:
            self._discard(tmp_path)
            raise PersistError(f"cannot write state file {self._path}: {e}") from e

        self._log.debug("Saved state size=%d to %s", state.size, self._path)

    def clear(self) -> bool:
        """Delete the persisted record. Returns False if there was none."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistError(f"cannot remove state file {self._path}: {e}") from e
        self._log.info("Removed state file %s", self._path)
        return True

    def _ensure_dir(self) -> None:
        directory = self._path.parent
        if not directory.is_dir():
            directory.mkdir(mode=STATE_DIR_MODE, parents=True, exist_ok=True)
            self._log.info("Created state directory %s", directory)

    def _discard(self, tmp_path: Path) -> None:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self._log.warning("Could not remove temporary state file %s: %s", tmp_path, e)
