import re
import logging
import discord
from discord import app_commands
from discord.ext import commands
from chatranslator.settings import (
    TRANSLATOR_DB_PATH,
    RELAY_CHANNEL_IDS,
    TRANSLATION_OUTPUT_CHANNEL_ID,
    LOCAL_PLAYER_NAME,
    DISPATCH_MIN_INTERVAL_SECONDS,
    DISPATCH_TICK_SECONDS,
    TRANSLATION_MAX_ATTEMPTS,
    BOT_TAIL_CHAT_LOG,
    CHAT_LOG_PATH,
    LOG_POLL_SECONDS,
)
from chatranslator.config import (
    ConfigStore,
    VALID_LANGUAGES,
    MAX_DELAY_MS,
    language_name,
)
from chatranslator.db import TranslatorDB
from chatranslator.core.service import ChatTranslationService
from chatranslator.ingest.log_tail import LogTailAdapter
from chatranslator.translation.factory import get_translator
from chatranslator.utils.text_utils import format_translation, split_message

log = logging.getLogger(__name__)

SOURCE_LANGUAGE_CHOICES = [
    app_commands.Choice(name=language_name(code), value=code) for code in VALID_LANGUAGES
]
TARGET_LANGUAGE_CHOICES = [
    app_commands.Choice(name=language_name(code), value=code)
    for code in VALID_LANGUAGES
    if code != "auto"
]


def relay_line(message: str) -> str:
    """Rewrite a relay bot line into the `<Player> message` chat form.

    Handles:
    - '<t:1234567890:t> **Username**: content'
    - '**Username:** content'
    Anything else is passed through unchanged.
    """
    # Strip Discord timestamp prefix if present
    message = re.sub(r'^<t:\d+:[tTdDfFR]>\s*', '', message)

    # **Username:** (colon inside bold) or **Username**: (colon outside bold)
    match = re.match(r'^(?:\*\*([^*]+?)(?::\*\*|\*\*:))\s*(.*)$', message, re.DOTALL)
    if match:
        return f"<{match.group(1).strip()}> {match.group(2).strip()}"
    return message


class DiscordChannelSink:
    """Posts formatted translations to a Discord channel."""

    def __init__(self, bot, channel_id: int):
        self.bot = bot
        self.channel_id = channel_id

    async def deliver(self, sender: str, original: str, translated: str, show_original: bool):
        channel = self.bot.get_channel(self.channel_id)
        if not channel:
            log.warning(f"Translation output channel {self.channel_id} not found")
            return
        text = format_translation(sender, original, translated, show_original)
        for chunk in split_message(text):
            await channel.send(chunk)


class TranslationCog(commands.Cog):
    """Feeds relayed game chat into the translation pipeline and exposes its settings."""

    translator = app_commands.Group(name="translator", description="Chat translation settings")

    def __init__(self, bot):
        self.bot = bot
        self.config = ConfigStore(TranslatorDB(TRANSLATOR_DB_PATH))
        self.sink = DiscordChannelSink(bot, TRANSLATION_OUTPUT_CHANNEL_ID)
        self.service = ChatTranslationService(
            self.config,
            get_translator(bot.http_session),
            self.sink,
            self_name=LOCAL_PLAYER_NAME,
            min_interval=DISPATCH_MIN_INTERVAL_SECONDS,
            tick_seconds=DISPATCH_TICK_SECONDS,
            max_attempts=TRANSLATION_MAX_ATTEMPTS,
        )
        self.relay_channel_ids = set(RELAY_CHANNEL_IDS)
        self.log_tail = None
        if BOT_TAIL_CHAT_LOG:
            self.log_tail = LogTailAdapter(self.service, CHAT_LOG_PATH, poll_seconds=LOG_POLL_SECONDS)

    async def cog_load(self):
        self.service.start()
        if self.log_tail:
            log.info(f"Following chat log {CHAT_LOG_PATH}")
            self.log_tail.start()

    async def cog_unload(self):
        if self.log_tail:
            self.log_tail.stop()
        await self.service.stop()

    # --- Ingestion ---

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author == self.bot.user:
            return
        if message.channel.id not in self.relay_channel_ids or not message.content:
            return

        try:
            for line in message.content.splitlines():
                if not line.strip():
                    continue
                if message.author.bot:
                    raw = relay_line(line)
                else:
                    raw = f"<{message.author.display_name}> {line}"
                self.service.submit(raw, source=f"discord:{message.channel.id}", immediate=True)
        except Exception as e:
            log.error(f"Error handling relayed chat message: {e}")

    # --- Slash Commands ---

    def status_embed(self) -> discord.Embed:
        status = self.service.status()
        embed = discord.Embed(title="Chat Translation", color=discord.Color.blurple())
        embed.add_field(name="Translation", value="✅ Enabled" if self.config.enabled else "❌ Disabled")
        embed.add_field(name="Source language", value=language_name(self.config.source_language))
        embed.add_field(name="Target language", value=language_name(self.config.target_language))
        embed.add_field(name="Show original", value="Yes" if self.config.show_original else "No")
        embed.add_field(name="Delay", value=f"{self.config.delay_ms} ms")
        embed.add_field(
            name="Queue",
            value=f"{status['queued']} queued, {status['pending']} pending, {status['in_flight']} in flight",
            inline=False,
        )
        return embed

    @translator.command(name="status", description="Show the current translation settings")
    async def status(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=self.status_embed(), ephemeral=True)

    @translator.command(name="toggle", description="Turn chat translation on or off")
    async def toggle(self, interaction: discord.Interaction):
        enabled = self.config.toggle()
        await interaction.response.send_message(
            "✅ Chat translation ON" if enabled else "⏸️ Chat translation OFF", ephemeral=True
        )

    @translator.command(name="source", description="Set the language chat is translated from")
    @app_commands.describe(language="Source language")
    @app_commands.choices(language=SOURCE_LANGUAGE_CHOICES)
    async def source(self, interaction: discord.Interaction, language: str):
        await self._apply(interaction, self.config.set_source_language, language,
                          f"Source language set to **{language_name(language)}**.")

    @translator.command(name="target", description="Set the language chat is translated into")
    @app_commands.describe(language="Target language")
    @app_commands.choices(language=TARGET_LANGUAGE_CHOICES)
    async def target(self, interaction: discord.Interaction, language: str):
        await self._apply(interaction, self.config.set_target_language, language,
                          f"Target language set to **{language_name(language)}**.")

    @translator.command(name="show-original", description="Show the original message above the translation")
    async def show_original(self, interaction: discord.Interaction, value: bool):
        await self._apply(interaction, self.config.set_show_original, value,
                          f"Show original {'enabled' if value else 'disabled'}.")

    @translator.command(name="delay", description="Delay before queued translations are shown")
    @app_commands.describe(ms="Delay in milliseconds")
    async def delay(self, interaction: discord.Interaction, ms: app_commands.Range[int, 0, MAX_DELAY_MS]):
        await self._apply(interaction, self.config.set_delay_ms, ms, f"Translation delay set to {ms} ms.")

    @translator.command(name="reset", description="Reset translation settings to defaults")
    async def reset(self, interaction: discord.Interaction):
        self.config.reset()
        await interaction.response.send_message("✅ Translation settings reset.", ephemeral=True)

    @translator.command(name="help", description="List the translator commands")
    async def show_help(self, interaction: discord.Interaction):
        lines = [
            "`/translator status` - show current settings",
            "`/translator toggle` - turn translation on/off",
            "`/translator source <language>` - set source language",
            "`/translator target <language>` - set target language",
            "`/translator show-original <true|false>` - show the original message",
            "`/translator delay <ms>` - delay for queued translations",
            "`/translator reset` - reset all settings",
            "`/translate <text>` - translate a piece of text",
        ]
        await interaction.response.send_message("\n".join(lines), ephemeral=True)

    async def _apply(self, interaction: discord.Interaction, setter, value, success: str):
        try:
            setter(value)
        except ValueError as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return
        await interaction.response.send_message(f"✅ {success}", ephemeral=True)

    @app_commands.command(name="translate", description="Translate text with the current settings")
    @app_commands.describe(text="The text to translate")
    async def translate_text(self, interaction: discord.Interaction, text: str):
        await interaction.response.defer(ephemeral=True)
        try:
            result = await self.service.translate_now(text)
        except Exception as e:
            log.error(f"Error in /translate: {e}")
            await interaction.followup.send(f"❌ Translation failed: {e}", ephemeral=True)
            return

        if result:
            embed = discord.Embed(
                title=f"Translation → {language_name(self.config.target_language)}",
                description=result,
                color=discord.Color.blurple()
            )
            embed.add_field(name="Original", value=text[:1024], inline=False)
            await interaction.followup.send(embed=embed, ephemeral=True)
        else:
            await interaction.followup.send("Translation failed.", ephemeral=True)
