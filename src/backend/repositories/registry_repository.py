"""
Registry repository for the flat (non-workspace) keys.

Keys:
- election_workspaces: JSON list of {id, name}
- election_last_workspace_id: raw workspace id string
- election_superAdminProfile: JSON admin profile
- election_theme: raw "light" / "dark"
- election_system_auditLog: JSON audit entries for registry-level actions
"""

import json
from typing import Any, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from models.audit import AuditLogEntry
from models.election import AdminProfile, Workspace
from repositories.kv_store import KeyValueStore

logger = structlog.get_logger(__name__)

WORKSPACES_KEY = "election_workspaces"
LAST_WORKSPACE_KEY = "election_last_workspace_id"
SUPER_ADMIN_KEY = "election_superAdminProfile"
THEME_KEY = "election_theme"
SYSTEM_AUDIT_KEY = "election_system_auditLog"

_workspaces_adapter = TypeAdapter(list[Workspace])
_audit_adapter = TypeAdapter(list[AuditLogEntry])


class RegistryRepository:
    """Repository for registry-level flat keys."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self, key: str, adapter: TypeAdapter, default: Any) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("registry_value_malformed", key=key, errors=e.error_count())
            return default

    def _dump(self, key: str, adapter: TypeAdapter, value: Any) -> None:
        self.store.set(key, json.dumps(adapter.dump_python(value, mode="json", by_alias=True)))

    # ========================================================================
    # Workspaces
    # ========================================================================

    def get_workspaces(self) -> list[Workspace]:
        return self._load(WORKSPACES_KEY, _workspaces_adapter, [])

    def save_workspaces(self, workspaces: list[Workspace]) -> None:
        self._dump(WORKSPACES_KEY, _workspaces_adapter, workspaces)

    def get_last_workspace_id(self) -> Optional[str]:
        return self.store.get(LAST_WORKSPACE_KEY) or None

    def set_last_workspace_id(self, workspace_id: str) -> None:
        self.store.set(LAST_WORKSPACE_KEY, workspace_id)

    def clear_last_workspace_id(self) -> None:
        self.store.remove(LAST_WORKSPACE_KEY)

    # ========================================================================
    # Super Admin
    # ========================================================================

    def get_super_admin_profile(self) -> Optional[AdminProfile]:
        raw = self.store.get(SUPER_ADMIN_KEY)
        if raw is None:
            return None
        try:
            return AdminProfile.model_validate_json(raw)
        except ValidationError:
            logger.warning("registry_value_malformed", key=SUPER_ADMIN_KEY)
            return None

    def save_super_admin_profile(self, profile: AdminProfile) -> None:
        self.store.set(SUPER_ADMIN_KEY, json.dumps(profile.to_document()))

    # ========================================================================
    # Preferences and system log
    # ========================================================================

    def get_theme(self) -> Optional[str]:
        return self.store.get(THEME_KEY)

    def set_theme(self, theme: str) -> None:
        self.store.set(THEME_KEY, theme)

    def get_system_log(self) -> list[AuditLogEntry]:
        return self._load(SYSTEM_AUDIT_KEY, _audit_adapter, [])

    def save_system_log(self, entries: list[AuditLogEntry]) -> None:
        self._dump(SYSTEM_AUDIT_KEY, _audit_adapter, entries)
