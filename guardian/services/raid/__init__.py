"""
Guardian - Raid Package
=======================

Join-rate raid detection, lockdown and the dangerous-bot deny-list.
"""

from guardian.services.raid.denylist import load_dangerous_bots
from guardian.services.raid.service import RaidService

__all__ = ["RaidService", "load_dangerous_bots"]
