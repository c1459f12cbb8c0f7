"""
Guardian - Discord Moderation Bot
=================================

Real-time abuse detection for Discord guilds: similarity spam, thread
spam, join raids, nuke bots, hazardous GIFs and word filters.
"""

__version__ = "1.0.0"
