"""
Guardian - Commands Package
===========================

Slash command Cogs.

Available Commands:
    /guard raid-unlock      End a raid lockdown
    /guard gif              Toggle the GIF guard
    /guard gif-urls         Toggle scanning of image URLs in messages
    /guard insults          Toggle the insult filter
    /guard exempt-add       Exempt a role from a detector
    /guard exempt-remove    Remove a role exemption
    /guard ngword-add       Add an NG-word
    /guard ngword-remove    Remove an NG-word
    /guard ngword-level     Set the NG-word punishment level
    /guard ngword-options   Set NG-word matching options
    /guard ngword-exception Exempt a role from NG-words only
    /guard thread-spam      Override thread-spam limits
    /guard status           Show the guild's settings
"""

COMMAND_COGS = [
    "guardian.commands.guard",
]


__all__ = [
    "COMMAND_COGS",
]
