from __future__ import annotations

import logging

import discord
from discord.ext import commands
from dotenv import load_dotenv

from .commands import register_commands
from .config import Config, load_config
from .db import Database
from .reporter import Reporter
from .tracker import WorkTracker


class FichajeBot(commands.Bot):
    def __init__(self, config: Config, db: Database) -> None:
        intents = discord.Intents.none()
        intents.guilds = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config
        self.db = db
        self.logger = logging.getLogger("fichaje-bot")
        self.tracker = WorkTracker(
            db=db,
            tz=config.timezone,
            break_minutes=config.break_minutes,
            logger=logging.getLogger("fichaje.tracker"),
        )
        self.reporter = Reporter(self.tracker)

    async def setup_hook(self) -> None:
        register_commands(self)
        await self.tree.sync(guild=discord.Object(id=self.config.guild_id))

    async def on_ready(self) -> None:
        self.logger.info("Connected as %s (%s)", self.user, self.user.id if self.user else "unknown")
        if self.get_guild(self.config.guild_id) is None:
            self.logger.error("Configured guild %s not found", self.config.guild_id)
            await self.close()
            return

        active = self.tracker.active_session
        self.logger.info(
            "Tracking %d sessions for user %s (clocked in: %s)",
            len(self.tracker.sessions),
            self.config.owner_user_id,
            "yes" if active is not None else "no",
        )

    async def close(self) -> None:
        self.db.close()
        await super().close()


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    load_dotenv()
    configure_logging()

    config = load_config()
    db = Database(config.database_path)
    db.initialize()

    bot = FichajeBot(config=config, db=db)
    bot.run(config.discord_token)


if __name__ == "__main__":
    main()
