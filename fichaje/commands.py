import io
from typing import Optional

import discord
from discord import app_commands

from .backup import BackupFormatError, backup_filename
from .formatting import format_duration
from .parsing import parse_local_datetime
from .tracker import InvalidSessionError, TrackerError, utc_now


def register_commands(bot):
    """Register all slash commands on the bot. Called once during setup."""
    guild_scope = discord.Object(id=bot.config.guild_id)
    tz = bot.config.timezone

    async def ensure_owner(interaction) -> bool:
        if interaction.guild is None or interaction.guild.id != bot.config.guild_id:
            await interaction.response.send_message("This command can only be used in the configured server.", ephemeral=True)
            return False
        if interaction.user.id != bot.config.owner_user_id:
            await interaction.response.send_message("Only the tracker owner can use this command.", ephemeral=True)
            return False
        return True

    async def report_error(interaction, message) -> None:
        await interaction.response.send_message(f"⚠️ {message}", ephemeral=True)

    @bot.tree.command(name="status", description="Show whether you are clocked in", guild=guild_scope)
    async def status(interaction):
        if not await ensure_owner(interaction):
            return
        await interaction.response.send_message(bot.reporter.build_status_content(utc_now()), ephemeral=True)

    @bot.tree.command(name="clock-in", description="Start a work session", guild=guild_scope)
    @app_commands.describe(time="HH:MM today or YYYY-MM-DD HH:MM (defaults to now)")
    async def clock_in(interaction, time: Optional[str] = None):
        if not await ensure_owner(interaction):
            return

        now = utc_now()
        try:
            started = parse_local_datetime(time, tz, now) if time else now
            active = bot.tracker.clock_in(started)
        except TrackerError as exc:
            await report_error(interaction, exc)
            return

        started_local = active.start_time.astimezone(tz)
        await interaction.response.send_message(
            f"Clocked in at `{started_local.strftime('%Y-%m-%d %H:%M')}`.",
            ephemeral=True,
        )

    @bot.tree.command(name="clock-out", description="Close the running work session", guild=guild_scope)
    @app_commands.describe(time="HH:MM today or YYYY-MM-DD HH:MM (defaults to now)")
    async def clock_out(interaction, time: Optional[str] = None):
        if not await ensure_owner(interaction):
            return

        now = utc_now()
        try:
            ended = parse_local_datetime(time, tz, now) if time else now
            session = bot.tracker.clock_out(ended)
        except TrackerError as exc:
            await report_error(interaction, exc)
            return

        await interaction.response.send_message(
            f"Clocked out. Session `{session.id}` lasted `{session.duration}`.",
            ephemeral=True,
        )

    @bot.tree.command(name="history", description="Show totals and sessions grouped by week", guild=guild_scope)
    @app_commands.describe(search="Filter by weekday, date, 'nocturna' or 'festivo'")
    async def history(interaction, search: Optional[str] = None):
        if not await ensure_owner(interaction):
            return
        await interaction.response.send_message(bot.reporter.build_history_content(search), ephemeral=True)

    @bot.tree.command(name="edit", description="Replace the start and end of a session", guild=guild_scope)
    @app_commands.describe(
        session_id="Session id as shown by /history",
        start="YYYY-MM-DD HH:MM",
        end="YYYY-MM-DD HH:MM",
    )
    async def edit(interaction, session_id: str, start: str, end: str):
        if not await ensure_owner(interaction):
            return

        now = utc_now()
        try:
            updated = bot.tracker.edit_session(
                _parse_session_id(session_id),
                parse_local_datetime(start, tz, now),
                parse_local_datetime(end, tz, now),
            )
        except TrackerError as exc:
            await report_error(interaction, exc)
            return

        await interaction.response.send_message(
            f"Updated: {bot.reporter.describe_session(updated)}",
            ephemeral=True,
        )

    @bot.tree.command(name="delete", description="Delete a session", guild=guild_scope)
    @app_commands.describe(session_id="Session id as shown by /history")
    async def delete(interaction, session_id: str):
        if not await ensure_owner(interaction):
            return

        try:
            removed = bot.tracker.delete_session(_parse_session_id(session_id))
        except TrackerError as exc:
            await report_error(interaction, exc)
            return

        await interaction.response.send_message(
            f"Deleted session `{removed.id}` (`{format_duration(removed.duration_ms)}`).",
            ephemeral=True,
        )

    @bot.tree.command(name="export", description="Download a JSON backup of every session", guild=guild_scope)
    async def export(interaction):
        if not await ensure_owner(interaction):
            return

        payload = bot.tracker.export_backup().encode("utf-8")
        filename = backup_filename(utc_now().astimezone(tz).date())
        await interaction.response.send_message(
            f"Backup with {len(bot.tracker.sessions)} sessions.",
            file=discord.File(io.BytesIO(payload), filename=filename),
            ephemeral=True,
        )

    @bot.tree.command(name="import", description="Replace all data with a JSON backup", guild=guild_scope)
    @app_commands.describe(backup="A file produced by /export. Overwrites all current data.")
    async def import_(interaction, backup: discord.Attachment):
        if not await ensure_owner(interaction):
            return

        try:
            raw = await backup.read()
            count = bot.tracker.import_backup(raw)
        except BackupFormatError as exc:
            bot.logger.warning("Rejected backup %s: %s", backup.filename, exc)
            await report_error(interaction, f"Invalid backup file: {exc}")
            return
        except discord.HTTPException:
            bot.logger.exception("Failed to download backup %s", backup.filename)
            await report_error(interaction, "Could not download the attachment.")
            return

        await interaction.response.send_message(f"Imported {count} sessions.", ephemeral=True)


def _parse_session_id(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidSessionError(f"`{raw}` is not a session id.") from exc
