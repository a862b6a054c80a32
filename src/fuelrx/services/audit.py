"""Admin audit logging service."""

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

AdminActionType = Literal[
    "update_ingredient", "update_nutrition", "delete_ingredient", "bulk_update"
]
AuditEntityType = Literal["ingredient", "ingredient_nutrition"]
FieldChanges = dict[str, dict[str, object]]

_logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for admin audit entries."""

    def create_entry(
        self,
        admin_user_id: str,
        action: AdminActionType,
        entity_type: AuditEntityType,
        entity_id: str,
        changes: FieldChanges,
    ) -> None:
        """Create an audit log row."""


@dataclass
class AuditService:
    """Service for recording admin actions."""

    repository: AuditRepository

    def record_admin_action(
        self,
        admin_user_id: str,
        action: AdminActionType,
        entity_type: AuditEntityType,
        entity_id: str,
        changes: FieldChanges,
    ) -> bool:
        """Persist an admin action; returns False if the write failed.

        A failed audit write never blocks the admin operation itself.
        """
        try:
            self.repository.create_entry(
                admin_user_id=admin_user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                changes=changes,
            )
        except Exception:
            _logger.exception(
                "Failed to log admin action %s on %s %s",
                action,
                entity_type,
                entity_id,
            )
            return False
        return True
