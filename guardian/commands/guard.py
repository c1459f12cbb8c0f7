"""
Guardian - Guard Command Cog
============================

Operator commands for per-guild detector settings and raid recovery.
All commands require Manage Server and reply ephemerally.
"""

from typing import List, Optional, TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.services.word_filter.ngwords import describe_punishment

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


CATEGORY_CHOICES: List[app_commands.Choice[str]] = [
    app_commands.Choice(name=c.value, value=c.value) for c in ExemptCategory
]


def _on_off(enabled: bool) -> str:
    return "On" if enabled else "Off"


class GuardCog(commands.Cog):
    """Cog for /guard settings commands."""

    guard = app_commands.Group(
        name="guard",
        description="Guardian moderation settings",
        default_permissions=discord.Permissions(manage_guild=True),
        guild_only=True,
    )

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

        logger.tree("Guard Cog Loaded", [
            ("Commands", "/guard (13 subcommands)"),
            ("Permission", "Manage Server"),
        ], emoji="🛡️")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _reply(
        self,
        interaction: discord.Interaction,
        title: str,
        description: str,
        color: int = EmbedColors.LOG_POSITIVE,
    ) -> None:
        embed = discord.Embed(title=title, description=description, color=color)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    def _audit(self, interaction: discord.Interaction, action: str, value: str) -> None:
        logger.tree("Guard Setting Changed", [
            ("Guild", f"{interaction.guild.name} ({interaction.guild.id})"),
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("Action", action),
            ("Value", value),
        ], emoji="⚙️")

    # =========================================================================
    # Raid
    # =========================================================================

    @guard.command(name="raid-unlock", description="End the raid lockdown (roles stay in place)")
    async def raid_unlock(self, interaction: discord.Interaction) -> None:
        guild = interaction.guild
        if not self.bot.raid.release_lockdown(guild.id):
            await self._reply(interaction, "Not Locked", "This server is not in raid lockdown.", EmbedColors.LOG_INFO)
            return

        self._audit(interaction, "raid-unlock", "released")
        await self.bot.mod_log.log(guild, "🔓 Raid Lockdown Released", [
            ("By", f"{interaction.user.mention} ({interaction.user.id})"),
        ], color=EmbedColors.LOG_POSITIVE)
        await self._reply(
            interaction,
            "🔓 Lockdown Released",
            "New members are no longer restricted. Remove the raid-guard role "
            "from legitimate members manually.",
        )

    # =========================================================================
    # Toggles
    # =========================================================================

    @guard.command(name="gif", description="Turn the GIF guard on or off")
    async def gif(self, interaction: discord.Interaction, enabled: bool) -> None:
        self.bot.settings.set_gif_detection(interaction.guild.id, enabled)
        self._audit(interaction, "gif", _on_off(enabled))
        await self._reply(interaction, "GIF Guard", f"GIF guard is now **{_on_off(enabled)}**.")

    @guard.command(name="gif-urls", description="Also scan image URLs posted in messages")
    async def gif_urls(self, interaction: discord.Interaction, enabled: bool) -> None:
        self.bot.settings.set_gif_url_scan(interaction.guild.id, enabled)
        self._audit(interaction, "gif-urls", _on_off(enabled))
        await self._reply(interaction, "GIF URL Scan", f"Image URL scanning is now **{_on_off(enabled)}**.")

    @guard.command(name="insults", description="Turn the insult filter on or off")
    async def insults(self, interaction: discord.Interaction, enabled: bool) -> None:
        self.bot.settings.set_insult_filter(interaction.guild.id, enabled)
        self._audit(interaction, "insults", _on_off(enabled))
        await self._reply(interaction, "Insult Filter", f"Insult filter is now **{_on_off(enabled)}**.")

    # =========================================================================
    # Exemptions
    # =========================================================================

    @guard.command(name="exempt-add", description="Exempt a role from a detector")
    @app_commands.choices(category=CATEGORY_CHOICES)
    async def exempt_add(self, interaction: discord.Interaction, category: str, role: discord.Role) -> None:
        added = self.bot.settings.add_exempt_role(interaction.guild.id, category, role.id)
        if not added:
            await self._reply(interaction, "Already Exempt", f"{role.mention} is already exempt from `{category}`.",
                              EmbedColors.LOG_INFO)
            return
        self._audit(interaction, f"exempt-add {category}", f"{role.name} ({role.id})")
        await self._reply(interaction, "Exemption Added", f"{role.mention} is now exempt from `{category}`.")

    @guard.command(name="exempt-remove", description="Remove a role's detector exemption")
    @app_commands.choices(category=CATEGORY_CHOICES)
    async def exempt_remove(self, interaction: discord.Interaction, category: str, role: discord.Role) -> None:
        removed = self.bot.settings.remove_exempt_role(interaction.guild.id, category, role.id)
        if not removed:
            await self._reply(interaction, "Not Exempt", f"{role.mention} is not exempt from `{category}`.",
                              EmbedColors.LOG_INFO)
            return
        self._audit(interaction, f"exempt-remove {category}", f"{role.name} ({role.id})")
        await self._reply(interaction, "Exemption Removed", f"{role.mention} is no longer exempt from `{category}`.")

    # =========================================================================
    # NG-Words
    # =========================================================================

    @guard.command(name="ngword-add", description="Add a blocked word")
    async def ngword_add(self, interaction: discord.Interaction, word: str) -> None:
        guild_id = interaction.guild.id
        word = word.strip()
        ruleset = self.bot.settings.ngword_ruleset(guild_id)
        if not word or word in ruleset.words:
            await self._reply(interaction, "Not Added", "That word is empty or already blocked.", EmbedColors.LOG_INFO)
            return
        ruleset.words.append(word)
        self.bot.settings.set_ngword_ruleset(guild_id, ruleset)
        self._audit(interaction, "ngword-add", word)
        await self._reply(interaction, "NG-Word Added", f"`{word}` is now blocked ({len(ruleset.words)} total).")

    @guard.command(name="ngword-remove", description="Remove a blocked word")
    async def ngword_remove(self, interaction: discord.Interaction, word: str) -> None:
        guild_id = interaction.guild.id
        ruleset = self.bot.settings.ngword_ruleset(guild_id)
        if word not in ruleset.words:
            await self._reply(interaction, "Not Found", f"`{word}` is not blocked.", EmbedColors.LOG_INFO)
            return
        ruleset.words.remove(word)
        self.bot.settings.set_ngword_ruleset(guild_id, ruleset)
        self._audit(interaction, "ngword-remove", word)
        await self._reply(interaction, "NG-Word Removed", f"`{word}` is no longer blocked.")

    @guard.command(name="ngword-level", description="Set the punishment for NG-words (0-9)")
    async def ngword_level(self, interaction: discord.Interaction, level: app_commands.Range[int, 0, 9]) -> None:
        guild_id = interaction.guild.id
        ruleset = self.bot.settings.ngword_ruleset(guild_id)
        ruleset.punishment_level = level
        self.bot.settings.set_ngword_ruleset(guild_id, ruleset)
        self._audit(interaction, "ngword-level", str(level))
        await self._reply(interaction, "Punishment Level", f"Level **{level}**: {describe_punishment(level)}.")

    @guard.command(name="ngword-options", description="Set NG-word matching options")
    async def ngword_options(
        self,
        interaction: discord.Interaction,
        case_sensitive: Optional[bool] = None,
        check_edits: Optional[bool] = None,
        dm_on_hit: Optional[bool] = None,
    ) -> None:
        guild_id = interaction.guild.id
        ruleset = self.bot.settings.ngword_ruleset(guild_id)
        if case_sensitive is not None:
            ruleset.case_sensitive = case_sensitive
        if check_edits is not None:
            ruleset.check_edits = check_edits
        if dm_on_hit is not None:
            ruleset.dm_on_hit = dm_on_hit
        self.bot.settings.set_ngword_ruleset(guild_id, ruleset)

        summary = (
            f"Case sensitive: **{_on_off(ruleset.case_sensitive)}**\n"
            f"Check edits: **{_on_off(ruleset.check_edits)}**\n"
            f"DM on hit: **{_on_off(ruleset.dm_on_hit)}**"
        )
        self._audit(interaction, "ngword-options", summary.replace("\n", ", ").replace("*", ""))
        await self._reply(interaction, "NG-Word Options", summary)

    @guard.command(name="ngword-exception", description="Exempt a role from NG-words only")
    async def ngword_exception(self, interaction: discord.Interaction, role: discord.Role, exempt: bool) -> None:
        guild_id = interaction.guild.id
        ruleset = self.bot.settings.ngword_ruleset(guild_id)
        if exempt:
            ruleset.exception_roles.add(role.id)
        else:
            ruleset.exception_roles.discard(role.id)
        self.bot.settings.set_ngword_ruleset(guild_id, ruleset)
        self._audit(interaction, "ngword-exception", f"{role.name} ({role.id}) = {exempt}")
        state = "exempt from" if exempt else "subject to"
        await self._reply(interaction, "NG-Word Exception", f"{role.mention} is now {state} NG-words.")

    # =========================================================================
    # Thread Spam
    # =========================================================================

    @guard.command(name="thread-spam", description="Override thread-spam limits for this server")
    async def thread_spam(
        self,
        interaction: discord.Interaction,
        threshold: app_commands.Range[int, 1, 100],
        window_seconds: app_commands.Range[int, 5, 3600],
    ) -> None:
        self.bot.settings.set_thread_spam_limits(interaction.guild.id, threshold, window_seconds)
        self._audit(interaction, "thread-spam", f"{threshold} / {window_seconds}s")
        await self._reply(
            interaction, "Thread Spam", f"Thread spam now triggers at **{threshold}** operations in **{window_seconds}s**."
        )

    # =========================================================================
    # Status
    # =========================================================================

    @guard.command(name="status", description="Show Guardian settings for this server")
    async def status(self, interaction: discord.Interaction) -> None:
        guild_id = interaction.guild.id
        settings = self.bot.settings
        t = self.bot.config.thresholds
        ruleset = settings.ngword_ruleset(guild_id)
        threshold, window = settings.thread_spam_limits(
            guild_id, t.thread_spam_threshold, t.thread_spam_window_seconds
        )

        embed = discord.Embed(title="🛡️ Guardian Status", color=EmbedColors.LOG_INFO)
        embed.add_field(name="Raid Lockdown", value=_on_off(self.bot.raid.is_locked(guild_id)), inline=True)
        embed.add_field(name="GIF Guard", value=_on_off(settings.gif_detection_enabled(guild_id)), inline=True)
        embed.add_field(name="GIF URLs", value=_on_off(settings.gif_url_scan_enabled(guild_id)), inline=True)
        embed.add_field(name="Insult Filter", value=_on_off(settings.insult_filter_enabled(guild_id)), inline=True)
        embed.add_field(
            name="NG-Words",
            value=f"{len(ruleset.words)} words, level {ruleset.punishment_level}",
            inline=True,
        )
        embed.add_field(name="Thread Spam", value=f"{threshold} / {window}s", inline=True)
        embed.add_field(
            name="Exempt Roles",
            value="\n".join(
                f"`{c.value}`: {len(settings.exempt_roles(guild_id, c.value))}" for c in ExemptCategory
            ),
            inline=False,
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: "GuardianBot") -> None:
    """Add the guard cog to the bot."""
    await bot.add_cog(GuardCog(bot))
