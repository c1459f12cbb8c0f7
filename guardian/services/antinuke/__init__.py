"""
Guardian - Anti-Nuke Package
============================

Detects automated accounts mass-creating or deleting roles and channels.
"""

from guardian.services.antinuke.attribution import ActorAttributor, AuditLogAttributor
from guardian.services.antinuke.service import AntiNukeService, NukeKind

__all__ = ["ActorAttributor", "AntiNukeService", "AuditLogAttributor", "NukeKind"]
