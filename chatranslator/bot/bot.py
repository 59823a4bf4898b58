import asyncio
import logging
from typing import Optional

import aiohttp
import discord
from discord.ext import commands

from chatranslator.settings import DISCORD_TOKEN, GUILD_ID
from chatranslator.bot.translation_cog import TranslationCog

log = logging.getLogger(__name__)


class ChatTranslatorBot(commands.Bot):
    """Reads relayed game chat and posts translations back to Discord."""

    def __init__(self, guild_id: int = GUILD_ID):
        intents = discord.Intents.default()
        # Relayed chat is read from message bodies
        intents.message_content = True
        super().__init__(command_prefix="!", intents=intents)
        self.guild_id = guild_id
        self.http_session: Optional[aiohttp.ClientSession] = None

    async def setup_hook(self):
        self.http_session = aiohttp.ClientSession()
        await self.add_cog(TranslationCog(self))
        await self.sync_commands()

    async def sync_commands(self) -> int:
        """Register slash commands, on the configured guild if there is one."""
        if not self.guild_id:
            synced = await self.tree.sync()
            log.info(f"Synced {len(synced)} global commands")
            return len(synced)

        guild = discord.Object(id=self.guild_id)
        self.tree.copy_global_to(guild=guild)
        synced = await self.tree.sync(guild=guild)
        log.info(f"Synced {len(synced)} commands to guild {self.guild_id}")
        return len(synced)

    async def close(self):
        await super().close()
        if self.http_session and not self.http_session.closed:
            await self.http_session.close()

    async def on_ready(self):
        # pyrefly: ignore [missing-attribute]
        log.info(f"Translator bot ready as {self.user} in {len(self.guilds)} guild(s)")


async def _run():
    if not DISCORD_TOKEN:
        raise SystemExit("DISCORD_TOKEN is not set")
    async with ChatTranslatorBot() as bot:
        await bot.start(DISCORD_TOKEN)


def main():
    discord.utils.setup_logging()
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        log.info("Shutting down")


if __name__ == "__main__":
    main()
