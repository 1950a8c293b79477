"""
Persistence gateways for Helium preferences.

A gateway is a plain key-value store addressed by a namespaced path plus a
key. The widget-set store and the app settings only ever need get, set and
delete on a single key, plus wiping a whole namespace on reset.
"""

import copy
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..utils.errors import PersistenceError

logger = logging.getLogger(__name__)

# Preferences files are small; anything larger is not ours
MAX_PREFERENCES_SIZE = 1024 * 1024

DEFAULT_PREFERENCES_DIR = "~/.helium/preferences"
DEFAULT_PREFERENCES_PATH = "com.helium.preferences"

_PATH_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class PersistenceGateway(ABC):
    """Key-value preferences medium addressed by (path, key)."""

    @abstractmethod
    def get(self, path: str, key: str) -> Any:
        """
        Read the value stored for a key.

        Returns:
            The stored value, or None when the key is absent
        """
        pass

    @abstractmethod
    def set(self, path: str, key: str, value: Any) -> None:
        """
        Store a value for a key, replacing any previous value.

        Raises:
            PersistenceError: If the medium cannot be written
        """
        pass

    @abstractmethod
    def delete(self, path: str, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            PersistenceError: If the medium cannot be written
        """
        pass

    @abstractmethod
    def reset(self, path: str) -> None:
        """
        Remove every key stored under a path.

        Raises:
            PersistenceError: If the medium cannot be reset
        """
        pass


class MemoryGateway(PersistenceGateway):
    """In-process gateway, used by tests and dry runs."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._domains: Dict[str, Dict[str, Any]] = copy.deepcopy(initial or {})

    def get(self, path: str, key: str) -> Any:
        return copy.deepcopy(self._domains.get(path, {}).get(key))

    def set(self, path: str, key: str, value: Any) -> None:
        self._domains.setdefault(path, {})[key] = copy.deepcopy(value)

    def delete(self, path: str, key: str) -> None:
        self._domains.get(path, {}).pop(key, None)

    def reset(self, path: str) -> None:
        self._domains.pop(path, None)

    def contains(self, path: str, key: str) -> bool:
        """Check whether a key is currently stored."""
        return key in self._domains.get(path, {})


class YamlFileGateway(PersistenceGateway):
    """
    File-backed gateway storing one YAML mapping per namespaced path.

    Each path maps to ``<base_dir>/<path>.yaml``. Binary values (such as
    encoded colors) round-trip through YAML's ``!!binary`` tag.
    """

    def __init__(self, base_dir: str = DEFAULT_PREFERENCES_DIR):
        """
        Initialize the gateway.

        Args:
            base_dir: Directory holding the preferences files
        """
        self.base_dir = Path(base_dir).expanduser()

    def file_for(self, path: str) -> Path:
        """
        Resolve the file backing a namespaced path.

        Raises:
            ValueError: If the path name could escape the base directory
        """
        if not path or not _PATH_PATTERN.match(path) or ".." in path:
            raise ValueError(f"Invalid preferences path: {path!r}")
        return self.base_dir / f"{path}.yaml"

    def get(self, path: str, key: str) -> Any:
        return self._read(path).get(key)

    def set(self, path: str, key: str, value: Any) -> None:
        data = self._read(path)
        data[key] = value
        self._write(path, data)

    def delete(self, path: str, key: str) -> None:
        data = self._read(path)
        if key not in data:
            return
        del data[key]
        self._write(path, data)

    def reset(self, path: str) -> None:
        file_path = self.file_for(path)
        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.debug(f"Nothing to reset at {file_path}")
        except OSError as e:
            raise PersistenceError(f"Cannot delete preferences {file_path}: {e}") from e
        logger.info(f"Reset preferences at {file_path}")

    def _read(self, path: str) -> Dict[str, Any]:
        """Load the mapping stored for a path; unreadable files count as empty."""
        file_path = self.file_for(path)
        if not file_path.exists():
            return {}

        try:
            file_size = file_path.stat().st_size
            if file_size > MAX_PREFERENCES_SIZE:
                logger.error(
                    f"Preferences file too large: {file_size} bytes "
                    f"(maximum {MAX_PREFERENCES_SIZE} bytes), ignoring {file_path}"
                )
                return {}

            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in preferences file {file_path}: {e}")
            return {}
        except OSError as e:
            logger.error(f"Cannot read preferences file {file_path}: {e}")
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Preferences file {file_path} is not a mapping, ignoring it")
            return {}
        return data

    def _write(self, path: str, data: Dict[str, Any]) -> None:
        """Atomically replace the file backing a path."""
        file_path = self.file_for(path)
        try:
            content = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
        except yaml.YAMLError as e:
            raise PersistenceError(f"Cannot write preferences {file_path}: {e}") from e

        # Files over the limit would be ignored on the next read
        size = len(content.encode("utf-8"))
        if size > MAX_PREFERENCES_SIZE:
            raise PersistenceError(
                f"Preferences too large: {size} bytes "
                f"(maximum {MAX_PREFERENCES_SIZE} bytes), not writing {file_path}"
            )

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".prefs.", dir=str(file_path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, file_path)
            finally:
                if os.path.exists(tmp):
                    os.unlink(tmp)
        except OSError as e:
            raise PersistenceError(f"Cannot write preferences {file_path}: {e}") from e

        logger.debug(f"Wrote preferences to {file_path}")
