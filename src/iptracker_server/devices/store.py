"""JSON snapshot file backend for the device registry.

The whole hostname-to-record mapping is kept in one indented JSON object.
Every save rewrites the file from scratch; there is no journal and no schema
version. Load and save never raise: a missing or unreadable snapshot is an
empty registry, and a failed write is logged and dropped.
"""

from __future__ import annotations

import json
import logging
import os
import pathlib
import tempfile
from typing import Any, Mapping

from iptracker_server.models import DeviceRecord

logger = logging.getLogger(__name__)


class JsonSnapshotStore:
    """Reads and writes the registry snapshot at *file_path*.

    Parameters
    ----------
    file_path:
        Location of the snapshot. Parent directories are created on demand.
    """

    def __init__(self, file_path: pathlib.Path | str) -> None:
        self._path = pathlib.Path(file_path)

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def load(self) -> dict[str, DeviceRecord]:
        """Return the persisted mapping, or an empty one if there is none."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Error creating directory %s", self._path.parent)
            return {}

        if not self._path.exists():
            logger.info("Data file does not exist yet: %s", self._path)
            return {}

        try:
            with open(self._path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Error reading data file %s: %s", self._path, exc)
            return {}

        try:
            return self._decode(data)
        except (TypeError, ValueError) as exc:
            # ValidationError is a ValueError subclass
            logger.warning("Error parsing data file %s: %s", self._path, exc)
            return {}

    def save(self, snapshot: Mapping[str, DeviceRecord]) -> bool:
        """Write *snapshot* over the current file. Returns False on failure."""
        data = {hostname: record.to_json_dict() for hostname, record in snapshot.items()}
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self._path)
            tmp_name = None
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing data file %s", self._path)
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        return True

    @staticmethod
    def _decode(data: Any) -> dict[str, DeviceRecord]:
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        devices: dict[str, DeviceRecord] = {}
        for hostname, value in data.items():
            if not isinstance(value, dict):
                raise TypeError(f"record for {hostname!r} is not an object")
            # The map key is authoritative for the hostname
            devices[hostname] = DeviceRecord.model_validate({**value, "hostname": hostname})
        return devices
