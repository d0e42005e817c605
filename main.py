import logging
import os
from dotenv import load_dotenv, find_dotenv
import discord
from discord.ext import commands

from utils.logging_config import setup_logging
from utils.config import ConfigManager
from cogs.roll import RollCog
from cogs.help import HelpCog

# --- 啟動階段 ---
load_dotenv(find_dotenv())
setup_logging()
logger = logging.getLogger("roll_bot")

TOKEN = os.getenv("DISCORD_TOKEN")
if not TOKEN:
    raise RuntimeError("請在 .env 設定 DISCORD_TOKEN")
PREFIX = os.getenv("COMMAND_PREFIX", "rpg!")

intents = discord.Intents.default()
intents.message_content = True  # 需要讀取訊息內容才能解析擲骰
bot = commands.Bot(command_prefix=PREFIX, intents=intents, help_command=None)

# 共用設定管理器（讓各 cogs 使用）
config_manager = ConfigManager()

@bot.event
async def setup_hook():
    await bot.add_cog(RollCog(bot, config_manager))
    await bot.add_cog(HelpCog(bot))

@bot.event
async def on_ready():
    logger.info(f"Logged in as {bot.user} (id={bot.user.id})")


if __name__ == "__main__":
    bot.run(TOKEN, log_handler=None)
