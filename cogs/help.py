# cogs/help.py
from __future__ import annotations

import logging
import discord
from discord.ext import commands

logger = logging.getLogger("roll_bot")

# ---- 內部：產生各頁 Embed ----
def _embed_home(prefix: str) -> discord.Embed:
    e = discord.Embed(
        title="📖 指令總覽",
        description="按下方按鈕切換分類；在指令後加 `! 原因` 可以註明擲骰用途。",
        color=discord.Color.blurple(),
    )
    e.add_field(
        name="🎲 擲骰",
        value=f"`{prefix}roll <指令>`（`{prefix}r`）｜`{prefix}batchroll <次數> <指令>`（`{prefix}br`）｜`{prefix}dicejail`",
        inline=False,
    )
    e.add_field(
        name="💾 儲存的指令",
        value=f"`{prefix}saveroll`｜`{prefix}runroll`｜`{prefix}listrolls`｜`{prefix}deleteroll`",
        inline=False,
    )
    e.set_footer(text=f"提示：例如 `{prefix}roll (2d20b + 1d8) ^ 2 / 3 ! 火球`")
    return e

def _embed_roll(prefix: str) -> discord.Embed:
    e = discord.Embed(title="🎲 擲骰與計算", color=discord.Color.green())
    e.add_field(
        name="骰式",
        value=(
            "`<顆數>d<面數>`，例如 `2d8`；只有一顆可省略顆數：`d20`。\n"
            "結尾加 `b`（最高）或 `w`（最低）只保留部分骰子：`3d10b2`；"
            "只保留一顆可省略數字：`2d20w`（劣勢）。"
        ),
        inline=False,
    )
    e.add_field(
        name="運算",
        value="支援 `+ - * / ^` 與括號，`x`、`×` 也是乘號、`÷` 是除號；也可以只做純計算。",
        inline=False,
    )
    e.add_field(
        name=f"{prefix}batchroll",
        value=f"同一個指令連續擲多次：`{prefix}br 6 4d6b3`。",
        inline=False,
    )
    return e

def _embed_saved(prefix: str) -> discord.Embed:
    e = discord.Embed(title="💾 儲存的指令（每伺服器獨立）", color=discord.Color.orange())
    e.add_field(
        name=f"{prefix}saveroll <名稱[,縮寫...]> <指令>",
        value="儲存常用指令（不可含 `!` 註解）；名稱不分大小寫，每位使用者各自一份。",
        inline=False,
    )
    e.add_field(
        name=f"{prefix}runroll <名稱或開頭> [追加指令] [! 原因]",
        value=f"執行儲存的指令，追加的部分會接在後面：`{prefix}rr 攻擊 + 2`。",
        inline=False,
    )
    e.add_field(
        name=f"{prefix}listrolls / {prefix}deleteroll <名稱>",
        value="列出本伺服器的指令；只能刪除自己儲存的。",
        inline=False,
    )
    return e

PAGES = {
    "home": _embed_home,
    "roll": _embed_roll,
    "saved": _embed_saved,
}

# ---- 互動面板 ----
class HelpView(discord.ui.View):
    def __init__(self, author_id: int, prefix: str, timeout: float = 180.0):
        super().__init__(timeout=timeout)
        self.author_id = author_id
        self.prefix = prefix
        self.message: discord.Message | None = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.author_id:
            await interaction.response.send_message("只有發起者可以操作這個幫助面板。", ephemeral=True)
            return False
        return True

    async def on_timeout(self) -> None:
        for c in self.children:
            if isinstance(c, discord.ui.Button):
                c.disabled = True
        if self.message:
            try:
                await self.message.edit(view=self)
            except discord.HTTPException as e:
                logger.debug(f"help panel edit failed: {e}")

    async def _show(self, interaction: discord.Interaction, page: str):
        emb = PAGES.get(page, _embed_home)(self.prefix)
        await interaction.response.edit_message(embed=emb, view=self)

    @discord.ui.button(label="總覽", style=discord.ButtonStyle.secondary)
    async def btn_home(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "home")

    @discord.ui.button(label="擲骰", style=discord.ButtonStyle.primary)
    async def btn_roll(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "roll")

    @discord.ui.button(label="儲存", style=discord.ButtonStyle.secondary)
    async def btn_saved(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "saved")

    @discord.ui.button(label="關閉", style=discord.ButtonStyle.danger)
    async def btn_close(self, interaction: discord.Interaction, _: discord.ui.Button):
        await interaction.response.edit_message(content="（已關閉說明）", embed=None, view=None)

# ---- Cog ----
class HelpCog(commands.Cog, name="Help"):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info("HelpCog ready.")

    @commands.command(name="help", aliases=["h"], help="顯示互動式說明")
    async def help_cmd(self, ctx: commands.Context, *, section: str | None = None):
        prefix = ctx.prefix or "rpg!"
        view = HelpView(author_id=ctx.author.id, prefix=prefix)
        sec = (section or "").lower().strip()
        page = {
            "roll": "roll", "r": "roll", "batchroll": "roll", "br": "roll",
            "saveroll": "saved", "runroll": "saved", "saved": "saved",
        }.get(sec, "home")
        msg = await ctx.reply(embed=PAGES[page](prefix), view=view)
        view.message = msg
