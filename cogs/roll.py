import logging
import discord
from discord.ext import commands
from utils.config import ConfigManager
from utils.dice import DiceError, DiceSpec
from utils.display import (
    batch_count_valid, clip_rolls, combine_saved, display_rolls, escape_str,
    format_batch, format_plain, format_value, has_annotation, is_big_result,
    split_annotation,
)
from utils.expression import EvaluationResult, evaluate_program, parse_roll_command

logger = logging.getLogger("roll_bot")

INVALID = "Invalid command."
JAIL_DICE = DiceSpec(size=20, count=5)

class RollCog(commands.Cog, name="Chance"):
    def __init__(self, bot: commands.Bot, config: ConfigManager):
        self.bot = bot
        self.config = config

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info("RollCog ready.")

    def _parse(self, command: str):
        lim = self.config.get_limits()
        return parse_roll_command(command, max_dice=lim.max_dice, max_sides=lim.max_sides)

    # ---- 擲骰 ----
    @commands.command(
        name="roll",
        aliases=["r", "eval", "evaluate", "calc", "calculate"],
        help="擲骰與計算：rpg!roll (2d20b + 1d8) ^ 2 / 3 ! 原因",
    )
    async def roll(self, ctx: commands.Context, *, command: str = ""):
        core, annotation = split_annotation(command)
        await self._execute_roll(ctx, core, annotation)

    async def _execute_roll(self, ctx: commands.Context, command: str, annotation: str | None):
        try:
            result = evaluate_program(self._parse(command))
        except DiceError as e:
            logger.info(f"Bad roll by {ctx.author} in #{ctx.channel}: {command!r} ({e})")
            return await ctx.reply(INVALID)

        if is_big_result(result.rolls):
            await ctx.reply(embed=self._big_embed(ctx, command, annotation, result))
        else:
            await ctx.reply(format_plain(
                result.value, result.rolls,
                mention=ctx.author.mention, annotation=annotation,
            ))

    def _big_embed(self, ctx: commands.Context, command: str, annotation: str | None,
                   result: EvaluationResult) -> discord.Embed:
        e = discord.Embed(color=discord.Color.blurple())
        e.add_field(name="For:", value=ctx.author.mention, inline=True)
        if annotation is not None:
            e.add_field(name="Reason:", value=f"`{escape_str(annotation)}`", inline=True)
        e.add_field(name="Command:", value=f"`{escape_str(command)}`", inline=False)
        e.add_field(name="Rolls:", value=clip_rolls(display_rolls(result.rolls)), inline=False)
        e.add_field(name="Result:", value=f"`{format_value(result.value)}`", inline=False)
        return e

    # ---- 連續擲骰 ----
    @commands.command(name="batchroll", aliases=["br"], help="連續擲骰：rpg!batchroll 10 2d6+1 ! 原因")
    async def batch_roll(self, ctx: commands.Context, count: int, *, command: str = ""):
        if not batch_count_valid(count, self.config.get_limits().max_batch):
            return await ctx.reply(INVALID)

        core, annotation = split_annotation(command)
        try:
            program = self._parse(core)
            results = [evaluate_program(program).value for _ in range(count)]
        except DiceError as e:
            logger.info(f"Bad batch roll by {ctx.author}: {core!r} ({e})")
            return await ctx.reply(INVALID)

        e = discord.Embed(color=discord.Color.blurple())
        e.add_field(name="For:", value=ctx.author.mention, inline=True)
        e.add_field(name="Count:", value=f"`{count}`", inline=True)
        if annotation:
            e.add_field(name="Reason:", value=f"`{escape_str(annotation)}`", inline=True)
        e.add_field(name="Command:", value=f"`{escape_str(core)}`", inline=False)
        e.add_field(name="Results:", value=f"```{format_batch(results)}```", inline=False)
        await ctx.reply(embed=e)

    # ---- 儲存的指令 ----
    @commands.command(name="saveroll", aliases=["sr"], help="儲存擲骰指令：rpg!saveroll 攻擊,atk 1d20 + 5")
    @commands.guild_only()
    async def save_roll(self, ctx: commands.Context, names: str, *, command: str):
        command = command.strip()
        if has_annotation(command):
            return await ctx.reply("儲存的指令不能包含註解（!）。")
        try:
            self._parse(command)
        except DiceError:
            return await ctx.reply(INVALID)

        try:
            saved = self.config.save_roll(ctx.guild.id, ctx.author.id, names, command)
        except ValueError:
            return await ctx.reply(INVALID)
        logger.info(f"Saved roll {saved.name!r} = {command!r} in guild {ctx.guild.id}")
        await ctx.reply(f"已儲存擲骰指令 `{escape_str(saved.name)}`。")

    @commands.command(name="runroll", aliases=["rr"], help="執行儲存的指令：rpg!runroll 攻擊 + 2 ! 偷襲")
    @commands.guild_only()
    async def run_roll(self, ctx: commands.Context, identifier: str, *, additional: str = ""):
        saved = self.config.find_saved_roll(ctx.guild.id, identifier, user_id=ctx.author.id)
        if saved is None:
            return await ctx.reply(f"找不到名稱或縮寫為 `{escape_str(identifier)}` 的指令。")

        command, reason = combine_saved(saved.command, saved.name, additional)
        await self._execute_roll(ctx, command, reason)

    @commands.command(name="listrolls", aliases=["lr"], help="列出本伺服器儲存的指令")
    @commands.guild_only()
    async def list_rolls(self, ctx: commands.Context):
        rolls = self.config.list_saved_rolls(ctx.guild.id)
        if not rolls:
            return await ctx.reply("目前沒有儲存的指令。")
        lines = [
            f"`{escape_str(', '.join(r.identifiers()))}`（<@{r.user_id}>）：`{escape_str(r.command)}`"
            for r in rolls
        ]
        await ctx.reply("\n".join(lines), allowed_mentions=discord.AllowedMentions.none())

    @commands.command(name="deleteroll", aliases=["dr"], help="刪除儲存的指令：rpg!deleteroll 攻擊")
    @commands.guild_only()
    async def delete_roll(self, ctx: commands.Context, name: str):
        if self.config.delete_saved_roll(ctx.guild.id, ctx.author.id, name):
            await ctx.reply(f"已刪除 `{escape_str(name)}`。")
        else:
            await ctx.reply(f"找不到你儲存的 `{escape_str(name)}`。")

    # ---- 骰子監獄 ----
    @commands.command(name="dicejail", aliases=["newdice"], help="把壞骰子關進骰子監獄，換一組新的")
    async def dice_jail(self, ctx: commands.Context):
        rolls, _ = JAIL_DICE.roll()
        e = discord.Embed(
            title="New Dice",
            description="The previous dice have been\nput in dice jail for now. 🎲⛓️",
            color=discord.Color.blurple(),
        )
        e.add_field(name="Requested By:", value=ctx.author.mention, inline=True)
        e.add_field(name=f"Sample Rolls ({JAIL_DICE}):", value=display_rolls([rolls]), inline=False)
        await ctx.reply(embed=e)

    @save_roll.error
    @run_roll.error
    async def guild_only_error(self, ctx: commands.Context, error):
        if isinstance(error, commands.NoPrivateMessage):
            await ctx.reply("請在伺服器內使用此指令。")
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.reply(f"用法：`{ctx.prefix}{ctx.command.name} <名稱> <指令>`")
        else:
            logger.error(f"{ctx.command} error: {error}")
            await ctx.reply(INVALID)
