"""
Audit logging for security-critical operations.

Logs authentication events and back-office mutations as JSON lines
for compliance, investigation, and monitoring purposes.

LOGGING SENSITIVE DATA: passwords and tokens are never logged.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from medora.core.security import TokenPayload

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "register", "login", "failed_login", "logout", "refresh", "password_change"
        identifier: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "user@example.com", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "01712345678", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": f"auth.{action}",
            "identifier": identifier,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "status_change", "review"
        resource_type: str,  # "medicine", "category", "brand", "order", "prescription", "user"
        resource_id: int,
        actor: TokenPayload,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log back-office mutations: who, what, when.

        Usage:
            AuditLog.log_action("status_change", "order", 12, claims, changes={"status": "SHIPPED"})
            AuditLog.log_action("delete", "brand", 3, claims)
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": f"{resource_type}.{action}",
            "user_id": actor.user_id,
            "role": actor.role.value,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_permission_change(
        user_id: int,
        granted_by: int,
        old_role: str,
        new_role: str,
    ):
        """
        Log role changes made from the admin users screen.

        Usage:
            AuditLog.log_permission_change(user_id=2, granted_by=1, old_role="CUSTOMER", new_role="PHARMACIST")
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": "permissions.changed",
            "user_id": user_id,
            "granted_by": granted_by,
            "old_role": old_role,
            "new_role": new_role,
        }

        audit_logger.warning(json.dumps(log_entry))
