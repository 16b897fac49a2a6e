"""
Workspace aggregate repository.

Each workspace is stored under a single key, ``workspace_<id>_aggregate``.
Every mutation is a read-modify-write of the whole aggregate performed while
holding the store lock:

    with repo.transaction(ws_id) as state:
        state.votes.extend(new_votes)
        voter.has_voted = True
    # one store.set() happens here, or nothing if the block raised

Workspaces written by older clients used one key per field
(``workspace_<id>_voters``, ``workspace_<id>_votes``...). Those keys are read
when no aggregate exists and are removed on the next save.
"""

import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from pydantic import ValidationError

from core.exceptions import StaleWorkspaceState
from models.workspace_state import WorkspaceAggregate
from repositories.kv_store import KeyValueStore

logger = structlog.get_logger(__name__)

AGGREGATE_FIELD = "aggregate"

# Per-field keys used before the aggregate existed, in persisted (camelCase) form
LEGACY_FIELDS = (
    "positions",
    "candidates",
    "voters",
    "votes",
    "electionStatus",
    "electionEndTime",
    "adminProfile",
    "auditLog",
    "resultsPublished",
)


def workspace_prefix(workspace_id: str) -> str:
    """Key prefix shared by every key that belongs to a workspace."""
    return f"workspace_{workspace_id}_"


def workspace_key(workspace_id: str, field: str) -> str:
    return f"{workspace_prefix(workspace_id)}{field}"


class WorkspaceRepository:
    """Loads, saves and purges workspace aggregates."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # ========================================================================
    # Read Operations
    # ========================================================================

    def load(self, workspace_id: str) -> WorkspaceAggregate:
        """
        Load a workspace aggregate.

        Missing or malformed data never raises: unreadable fields fall back
        to their empty defaults.
        """
        raw = self.store.get(workspace_key(workspace_id, AGGREGATE_FIELD))
        if raw is None:
            return self._load_legacy(workspace_id)

        try:
            return WorkspaceAggregate.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "workspace_aggregate_malformed",
                workspace_id=workspace_id,
                errors=e.error_count(),
            )

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return WorkspaceAggregate()
        if not isinstance(data, dict):
            return WorkspaceAggregate()
        return self._salvage(workspace_id, data)

    def _load_legacy(self, workspace_id: str) -> WorkspaceAggregate:
        data: dict[str, Any] = {}
        for field in LEGACY_FIELDS:
            raw = self.store.get(workspace_key(workspace_id, field))
            if raw is None:
                continue
            try:
                data[field] = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("workspace_field_unreadable", workspace_id=workspace_id, field=field)
        if not data:
            return WorkspaceAggregate()
        logger.info("workspace_legacy_layout_loaded", workspace_id=workspace_id, fields=sorted(data))
        return self._salvage(workspace_id, data)

    def _salvage(self, workspace_id: str, data: dict[str, Any]) -> WorkspaceAggregate:
        """Validate field by field, keeping every field that parses."""
        aggregate = WorkspaceAggregate()
        for key, value in data.items():
            try:
                partial = WorkspaceAggregate.model_validate({key: value})
            except ValidationError:
                logger.warning("workspace_field_dropped", workspace_id=workspace_id, field=key)
                continue
            for name in partial.model_fields_set:
                setattr(aggregate, name, getattr(partial, name))
        return aggregate

    # ========================================================================
    # Write Operations
    # ========================================================================

    def _stored_version(self, workspace_id: str) -> Optional[int]:
        """Version of the persisted aggregate, 0 if none, None if unreadable."""
        raw = self.store.get(workspace_key(workspace_id, AGGREGATE_FIELD))
        if raw is None:
            return 0
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return None
        version = data.get("version", 0) if isinstance(data, dict) else None
        return version if isinstance(version, int) else None

    def save(self, workspace_id: str, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        """
        Persist the aggregate with one store write and bump its version.

        Raises StaleWorkspaceState if another writer saved since the
        aggregate was loaded. Nothing is written in that case.
        """
        with self.store.lock():
            stored = self._stored_version(workspace_id)
            if stored is not None and stored != aggregate.version:
                logger.warning(
                    "workspace_save_conflict",
                    workspace_id=workspace_id,
                    loaded=aggregate.version,
                    stored=stored,
                )
                raise StaleWorkspaceState(workspace_id, aggregate.version, stored)
            aggregate.version += 1
            self.store.set(
                workspace_key(workspace_id, AGGREGATE_FIELD),
                json.dumps(aggregate.to_document()),
            )
            existing = set(self.store.list_keys(workspace_prefix(workspace_id)))
            for field in LEGACY_FIELDS:
                if workspace_key(workspace_id, field) in existing:
                    self.store.remove(workspace_key(workspace_id, field))
        return aggregate

    @contextmanager
    def transaction(self, workspace_id: str) -> Iterator[WorkspaceAggregate]:
        """
        Read-modify-write the aggregate under the store lock.

        The aggregate is re-read inside the lock, so concurrent writers never
        lose each other's updates. Nothing is written if the block raises.
        """
        with self.store.lock():
            aggregate = self.load(workspace_id)
            yield aggregate
            self.save(workspace_id, aggregate)

    def purge(self, workspace_id: str) -> list[str]:
        """Remove every key belonging to the workspace."""
        with self.store.lock():
            keys = self.store.list_keys(workspace_prefix(workspace_id))
            for key in keys:
                self.store.remove(key)
        logger.info("workspace_purged", workspace_id=workspace_id, keys=len(keys))
        return keys
