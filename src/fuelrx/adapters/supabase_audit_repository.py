"""Supabase repository for admin audit entries."""

from dataclasses import dataclass

from supabase import Client

from fuelrx.services.audit import (
    AdminActionType,
    AuditEntityType,
    AuditRepository,
    FieldChanges,
)


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed admin audit repository."""

    client: Client

    def create_entry(
        self,
        admin_user_id: str,
        action: AdminActionType,
        entity_type: AuditEntityType,
        entity_id: str,
        changes: FieldChanges,
    ) -> None:
        """Insert a row into admin_audit_log."""
        self.client.table("admin_audit_log").insert(
            {
                "admin_user_id": admin_user_id,
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "changes": changes,
            }
        ).execute()
