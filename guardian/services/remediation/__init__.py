"""
Guardian - Remediation Package
==============================

Role provisioning, idempotent message deletion and safe moderation calls.
"""

from guardian.services.remediation.actions import (
    MessageDeleter,
    safe_add_role,
    safe_ban,
    safe_kick,
    safe_remove_role,
    safe_timeout,
    send_transient,
)
from guardian.services.remediation.roles import RemediationRole, RoleProvisioner

__all__ = [
    "MessageDeleter",
    "RemediationRole",
    "RoleProvisioner",
    "safe_add_role",
    "safe_ban",
    "safe_kick",
    "safe_remove_role",
    "safe_timeout",
    "send_transient",
]
