"""File-backed JSON storage for hunk and group records.

Two flat documents live under the storage directory:

    spaces.json  {"active_group_id": "...", "groups": [...]}
    hunks.json   {"hunks": [...]}

A bare JSON list is accepted on load for either document. A missing or
empty document means "no records". Writes are atomic and owner-only.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from gitspaces.config.load_utils import load_json_document
from gitspaces.core.errors import LoadError
from gitspaces.core.secure_io import secure_mkdir, secure_write_atomic
from gitspaces.spaces.types import Group, Hunk

logger = logging.getLogger(__name__)


class SpacesStorage:
    """Load and save the hunk and group documents.

    All methods are synchronous; async callers run them with
    asyncio.to_thread().
    """

    def __init__(
        self,
        directory: Path,
        hunks_file: str = "hunks.json",
        groups_file: str = "spaces.json",
    ) -> None:
        self.directory = directory
        self.hunks_path = directory / hunks_file
        self.groups_path = directory / groups_file

    def _records(self, path: Path, key: str) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Load a document's record list and the enclosing object."""
        if not path.is_file():
            logger.debug("No %s document at %s", key, path)
            return [], {}

        data = load_json_document(path, error_context=key)
        if data is None:
            return [], {}
        if isinstance(data, list):
            return data, {}
        if isinstance(data, dict):
            records = data.get(key, [])
            if not isinstance(records, list):
                raise LoadError(f"{key}: Expected a list under {key!r} in {path}")
            return records, data
        raise LoadError(f"{key}: Expected object or list in {path}, got {type(data).__name__}")

    def _write(self, path: Path, document: dict[str, Any]) -> None:
        secure_mkdir(self.directory)
        secure_write_atomic(path, json.dumps(document, indent=2, ensure_ascii=False) + "\n")

    def load_hunks(self) -> list[Hunk]:
        """Load every hunk record.

        Raises:
            LoadError: If the document is malformed.
        """
        records, _ = self._records(self.hunks_path, "hunks")
        try:
            hunks = [Hunk.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"hunks: Invalid record in {self.hunks_path}: {e}") from e
        logger.debug("Loaded %d hunks from %s", len(hunks), self.hunks_path)
        return hunks

    def save_hunks(self, hunks: list[Hunk]) -> None:
        self._write(self.hunks_path, {"hunks": [h.to_dict() for h in hunks]})
        logger.debug("Saved %d hunks to %s", len(hunks), self.hunks_path)

    def load_groups(self) -> tuple[list[Group], str | None]:
        """Load every group record and the active group id.

        Raises:
            LoadError: If the document is malformed.
        """
        records, document = self._records(self.groups_path, "groups")
        try:
            groups = [Group.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"groups: Invalid record in {self.groups_path}: {e}") from e
        active_id = document.get("active_group_id") or None
        logger.debug("Loaded %d groups from %s", len(groups), self.groups_path)
        return groups, active_id

    def save_groups(self, groups: list[Group], active_group_id: str | None) -> None:
        self._write(
            self.groups_path,
            {
                "active_group_id": active_group_id,
                "groups": [g.to_dict() for g in groups],
            },
        )
        logger.debug("Saved %d groups to %s", len(groups), self.groups_path)
