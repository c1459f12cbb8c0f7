"""
Guardian - Events Package
=========================

Event handler Cogs routing Discord events to the detectors.

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener
    decorators. Cogs are loaded by the bot using load_extension().

    Event routing:
    - messages.py: spam, GIF guard and word filters
    - members.py: raid detection and dangerous bots
    - channels.py: anti-nuke, remediation overwrites on new channels
    - threads.py: thread spam
"""

EVENT_COGS = [
    "guardian.events.messages",
    "guardian.events.members",
    "guardian.events.channels",
    "guardian.events.threads",
]


__all__ = [
    "EVENT_COGS",
]
