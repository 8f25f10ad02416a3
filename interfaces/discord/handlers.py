from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Optional

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from application.auto_replies import auto_reply
from application.context import ActorContext, Reply, UserRef
from application.fun import INTERACTIONS
from application.router import CommandRouter
from domain.repositories import PermissionOracle
from infrastructure.config import Settings
from interfaces.discord.parsing import (
    emoji_cdn_url,
    parse_custom_emoji,
    split_prefix_command,
)


logger = logging.getLogger(__name__)

EMBED_COLOUR = discord.Colour.gold()
EMBED_TITLE_LIMIT = 256
_MENTION_RE = re.compile(r"^<@!?(\d+)>$")


class GuildPermissions(PermissionOracle):
    """
    Permission oracle for Discord-only actions (emoji stealing).

    The configured owner is always allowed; anyone else needs the guild's
    "Manage Emojis" permission.
    """

    def __init__(self, bot: commands.Bot, owner_id: Optional[str]) -> None:
        self._bot = bot
        self._owner_id = str(owner_id) if owner_id else None

    def has_manage_permission(self, actor_id: str, guild_id: Optional[str]) -> bool:
        if self._owner_id is not None and str(actor_id) == self._owner_id:
            return True
        if not guild_id:
            return False
        guild = self._bot.get_guild(int(guild_id))
        member = guild.get_member(int(actor_id)) if guild is not None else None
        return bool(member is not None and member.guild_permissions.manage_emojis)


def _build_actor_context(
    bot: commands.Bot,
    user: discord.abc.User,
    guild: Optional[discord.Guild],
) -> ActorContext:
    """Create an `ActorContext` from a Discord user."""

    def lookup(actor_id: str) -> Optional[str]:
        if not actor_id.isdigit():
            return None
        member = guild.get_member(int(actor_id)) if guild is not None else None
        if member is not None:
            return member.display_name
        cached = bot.get_user(int(actor_id))
        return cached.display_name if cached is not None else None

    latency = bot.latency
    return ActorContext(
        provider="discord",
        actor_id=str(user.id),
        display_name=user.display_name or user.name,
        guild_id=str(guild.id) if guild is not None else None,
        latency_ms=None if math.isnan(latency) else latency * 1000,
        name_lookup=lookup,
    )


def _user_ref(user: discord.abc.User) -> UserRef:
    return UserRef(id=str(user.id), display_name=user.display_name or user.name)


def _resolve_mentions(args: List[str], message: discord.Message) -> List[Any]:
    """Replace `<@id>` arguments with `UserRef`s carrying the display name."""

    mentioned = {str(m.id): m for m in message.mentions}
    resolved: List[Any] = []
    for arg in args:
        match = _MENTION_RE.match(arg)
        if match and match.group(1) in mentioned:
            resolved.append(_user_ref(mentioned[match.group(1)]))
        else:
            resolved.append(arg)
    return resolved


def render_reply(reply: Reply) -> Dict[str, Any]:
    """Translate a channel-neutral `Reply` into `send()` keyword arguments."""

    kwargs: Dict[str, Any] = {}
    if reply.text:
        kwargs["content"] = reply.text
    if reply.embed is not None:
        embed = discord.Embed(
            title=reply.embed.title[:EMBED_TITLE_LIMIT],
            description=reply.embed.description or None,
            colour=EMBED_COLOUR,
        )
        for name, value in reply.embed.fields:
            embed.add_field(name=name, value=value or "-", inline=False)
        if reply.embed.image_url:
            embed.set_image(url=reply.embed.image_url)
        kwargs["embed"] = embed
    if not kwargs:
        kwargs["content"] = "Done."
    return kwargs


def create_discord_bot(
    router: CommandRouter,
    settings: Settings,
) -> commands.Bot:
    """
    Configure and return a Discord bot wired to the command router.

    Prefix messages (`]cmd args`) and their slash counterparts go through
    the router; a few commands that only make sense on Discord (server and
    user info, avatars, emoji stealing) are hybrid discord.py commands here.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.members = True
    intents.emojis_and_stickers = True

    # Disable the default help command; `help` is served by the router.
    bot = commands.Bot(
        command_prefix=settings.command_prefix,
        intents=intents,
        help_command=None,
        case_insensitive=True,
    )
    guild_permissions = GuildPermissions(bot, settings.owner_id)

    async def setup_hook() -> None:
        try:
            synced = await bot.tree.sync()
            logger.info("Synced %d slash commands", len(synced))
        except discord.HTTPException as exc:
            logger.error("Slash command sync failed: %s", exc)

    bot.setup_hook = setup_hook

    async def _dispatch_interaction(
        interaction: discord.Interaction,
        command: str,
        args: List[Any],
    ) -> None:
        ctx = _build_actor_context(bot, interaction.user, interaction.guild)
        # Content lookups can outlast the 3 second interaction window.
        await interaction.response.defer(ephemeral=True, thinking=True)
        reply = await router.dispatch(command, args, ctx)
        await interaction.followup.send(ephemeral=True, **render_reply(reply))

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_message(message: discord.Message):
        if message.author.bot:
            return

        parsed = split_prefix_command(message.content, settings.command_prefix)
        if parsed is None:
            text = auto_reply(message.content)
            if text:
                await message.reply(text)
            return

        command, args = parsed
        if router.get(command) is None and bot.get_command(command) is not None:
            await bot.process_commands(message)
            return

        ctx = _build_actor_context(bot, message.author, message.guild)
        reply = await router.dispatch(command, _resolve_mentions(args, message), ctx)
        await message.channel.send(**render_reply(reply))

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.UserInputError):
            usage = f"{ctx.prefix}{ctx.command.qualified_name} {ctx.command.signature}".strip()
            await ctx.send(f"Usage: `{usage}`")
            return
        logger.error("Discord command %s failed", ctx.command, exc_info=error)
        await ctx.send("Something went wrong while running that command.")

    # ----- Discord-only commands (prefix and slash) -----

    @bot.hybrid_command(name="serverinfo", description="Get server info")
    async def serverinfo_cmd(ctx: commands.Context):
        guild = ctx.guild
        if guild is None:
            await ctx.send("This command only works in a server.")
            return
        embed = discord.Embed(title=guild.name, colour=EMBED_COLOUR)
        embed.add_field(name="Members", value=str(guild.member_count))
        embed.add_field(name="Channels", value=str(len(guild.channels)))
        embed.add_field(name="Roles", value=str(len(guild.roles)))
        embed.add_field(name="Created", value=discord.utils.format_dt(guild.created_at, "D"))
        if guild.owner_id:
            embed.add_field(name="Owner", value=f"<@{guild.owner_id}>")
        if guild.icon is not None:
            embed.set_thumbnail(url=guild.icon.url)
        await ctx.send(embed=embed)

    @bot.hybrid_command(name="userinfo", description="Get user info")
    async def userinfo_cmd(ctx: commands.Context, member: Optional[discord.Member] = None):
        member = member or ctx.author
        embed = discord.Embed(title=str(member), colour=EMBED_COLOUR)
        embed.add_field(name="ID", value=str(member.id))
        embed.add_field(name="Joined Discord", value=discord.utils.format_dt(member.created_at, "D"))
        joined = getattr(member, "joined_at", None)
        if joined is not None:
            embed.add_field(name="Joined server", value=discord.utils.format_dt(joined, "D"))
        embed.set_thumbnail(url=member.display_avatar.url)
        await ctx.send(embed=embed)

    @bot.hybrid_command(name="avatar", description="Get user avatar")
    async def avatar_cmd(ctx: commands.Context, member: Optional[discord.Member] = None):
        member = member or ctx.author
        embed = discord.Embed(title=f"{member.display_name}'s avatar", colour=EMBED_COLOUR)
        embed.set_image(url=member.display_avatar.url)
        await ctx.send(embed=embed)

    @bot.hybrid_command(name="stealemoji", description="Steal emoji")
    async def stealemoji_cmd(ctx: commands.Context, emoji: str):
        """
        `]stealemoji <:name:id>` -> copy a custom emoji into this server.
        """

        if ctx.guild is None:
            await ctx.send("This command only works in a server.")
            return
        if not guild_permissions.has_manage_permission(str(ctx.author.id), str(ctx.guild.id)):
            await ctx.send("You need the Manage Emojis permission to do that.")
            return
        await ctx.defer()

        parsed = parse_custom_emoji(emoji)
        if parsed is None:
            await ctx.send("That doesn't look like a custom emoji.")
            return
        name, emoji_id, animated = parsed

        timeout = aiohttp.ClientTimeout(total=settings.http_timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(emoji_cdn_url(emoji_id, animated)) as resp:
                    if resp.status != 200:
                        await ctx.send("Couldn't download that emoji.")
                        return
                    image = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Emoji download failed: %s", exc)
            await ctx.send("Discord's CDN is unavailable right now, try again later.")
            return

        try:
            created = await ctx.guild.create_custom_emoji(
                name=name,
                image=image,
                reason=f"stealemoji by {ctx.author}",
            )
        except discord.HTTPException as exc:
            await ctx.send(f"Couldn't add the emoji: {exc.text or exc}")
            return
        await ctx.send(f"Added {created}!")

    # ----- Slash commands routed through the command router -----

    @bot.tree.command(name="balance", description="Check balance")
    @app_commands.describe(user="User to check")
    async def balance_slash(interaction: discord.Interaction, user: Optional[discord.User] = None):
        args = [_user_ref(user)] if user is not None else []
        await _dispatch_interaction(interaction, "balance", args)

    @bot.tree.command(name="daily", description="Claim daily coins")
    async def daily_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "daily", [])

    @bot.tree.command(name="pay", description="Send coins")
    @app_commands.describe(user="Recipient", amount="Amount")
    async def pay_slash(interaction: discord.Interaction, user: discord.User, amount: int):
        await _dispatch_interaction(interaction, "pay", [_user_ref(user), amount])

    @bot.tree.command(name="shop", description="Show the shop")
    async def shop_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "shop", [])

    @bot.tree.command(name="buy", description="Buy an item")
    @app_commands.describe(item="Item id")
    async def buy_slash(interaction: discord.Interaction, item: str):
        await _dispatch_interaction(interaction, "buy", [item])

    @bot.tree.command(name="use", description="Use an item")
    @app_commands.describe(item="Item id")
    async def use_slash(interaction: discord.Interaction, item: str):
        await _dispatch_interaction(interaction, "use", [item])

    @bot.tree.command(name="inventory", description="Show your inventory")
    async def inventory_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "inventory", [])

    @bot.tree.command(name="trade", description="Trade item")
    @app_commands.describe(user="Recipient", item="Item id")
    async def trade_slash(interaction: discord.Interaction, user: discord.User, item: str):
        await _dispatch_interaction(interaction, "trade", [_user_ref(user), item])

    @bot.tree.command(name="leaderboard", description="Top balances")
    async def leaderboard_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "leaderboard", [])

    @bot.tree.command(name="gamble", description="Gamble coins: coin | slots | poker")
    @app_commands.describe(amount="Amount", game="coin|slots|poker")
    @app_commands.rename(game="type")
    async def gamble_slash(interaction: discord.Interaction, amount: int, game: Optional[str] = None):
        args: List[Any] = [amount]
        if game:
            args.append(game)
        await _dispatch_interaction(interaction, "gamble", args)

    @bot.tree.command(name="givemoney", description="(Owner) Give money")
    @app_commands.describe(user="User", amount="Amount")
    async def givemoney_slash(interaction: discord.Interaction, user: discord.User, amount: int):
        await _dispatch_interaction(interaction, "givemoney", [_user_ref(user), amount])

    @bot.tree.command(name="takemoney", description="(Owner) Take money")
    @app_commands.describe(user="User", amount="Amount")
    async def takemoney_slash(interaction: discord.Interaction, user: discord.User, amount: int):
        await _dispatch_interaction(interaction, "takemoney", [_user_ref(user), amount])

    @bot.tree.command(name="joke", description="Get a random joke")
    async def joke_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "joke", [])

    @bot.tree.command(name="meme", description="Get a random meme")
    async def meme_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "meme", [])

    @bot.tree.command(name="cat", description="Get a random cat")
    async def cat_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "cat", [])

    @bot.tree.command(name="dog", description="Get a random dog")
    async def dog_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "dog", [])

    @bot.tree.command(name="fact", description="Get a random fact")
    async def fact_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "fact", [])

    @bot.tree.command(name="quote", description="Get a random quote")
    async def quote_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "quote", [])

    @bot.tree.command(name="gif", description="Search a gif")
    @app_commands.describe(keyword="Keyword")
    async def gif_slash(interaction: discord.Interaction, keyword: str):
        await _dispatch_interaction(interaction, "gif", [keyword])

    @bot.tree.command(name="8ball", description="Ask the magic 8ball")
    @app_commands.describe(question="Your question")
    async def eight_ball_slash(interaction: discord.Interaction, question: str):
        await _dispatch_interaction(interaction, "8ball", [question])

    @bot.tree.command(name="coinflip", description="Flip a coin")
    async def coinflip_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "coinflip", [])

    @bot.tree.command(name="roll", description="Roll a dice")
    @app_commands.describe(sides="Number of sides")
    async def roll_slash(interaction: discord.Interaction, sides: Optional[int] = None):
        await _dispatch_interaction(interaction, "roll", [sides] if sides is not None else [])

    @bot.tree.command(name="pick", description="Pick an option")
    @app_commands.describe(options="Options separated by |")
    async def pick_slash(interaction: discord.Interaction, options: str):
        await _dispatch_interaction(interaction, "pick", [options])

    @bot.tree.command(name="ping", description="Check bot latency")
    async def ping_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "ping", [])

    def _interaction_slash(action: str) -> app_commands.Command:
        async def callback(interaction: discord.Interaction, user: discord.User):
            await _dispatch_interaction(interaction, action, [_user_ref(user)])

        command = app_commands.Command(
            name=action,
            description=f"{action.capitalize()} a user",
            callback=callback,
        )
        return app_commands.describe(user=f"User to {action}")(command)

    for action in INTERACTIONS:
        bot.tree.add_command(_interaction_slash(action))

    @bot.tree.command(name="help", description="Show all commands and usage")
    async def help_slash(interaction: discord.Interaction):
        await _dispatch_interaction(interaction, "help", [])

    return bot
