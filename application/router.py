from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from domain.errors import CoinbotError, ExternalServiceUnavailable, UnknownCommand

from . import economy, fun, gambling
from .context import ActorContext, Reply
from .services import Services


logger = logging.getLogger(__name__)

Handler = Callable[[ActorContext, List[Any], Services], Union[Reply, Awaitable[Reply]]]

UNKNOWN_COMMAND_REPLY = str(UnknownCommand(""))
GENERIC_FAILURE_REPLY = "Something went wrong while running that command."


@dataclass(frozen=True)
class CommandSpec:
    """A registered command: its name, arity, usage line and handler."""

    name: str
    handler: Handler
    usage: str
    summary: str
    min_args: int = 0
    aliases: Tuple[str, ...] = ()
    category: str = "Fun"


@dataclass
class CommandRouter:
    """
    Dispatch `(command, args, ctx)` to exactly one handler and always
    produce exactly one `Reply`.

    Domain errors become their own message, handler timeouts become a
    "service unavailable" reply, and anything else is logged and answered
    with a generic apology. Nothing propagates to the adapter.
    """

    services: Services
    timeout_seconds: float = 15.0
    _commands: Dict[str, CommandSpec] = field(default_factory=dict, init=False)
    _lookup: Dict[str, CommandSpec] = field(default_factory=dict, init=False)

    def register(self, spec: CommandSpec) -> None:
        for key in (spec.name, *spec.aliases):
            key = key.lower()
            if key in self._lookup:
                raise ValueError(f"Command name already registered: {key}")
            self._lookup[key] = spec
        self._commands[spec.name] = spec

    def get(self, command: str) -> Optional[CommandSpec]:
        return self._lookup.get((command or "").strip().lower())

    @property
    def commands(self) -> List[CommandSpec]:
        return list(self._commands.values())

    async def dispatch(
        self,
        command: str,
        args: Sequence[Any],
        ctx: ActorContext,
    ) -> Reply:
        spec = self.get(command)
        if spec is None:
            logger.debug("unknown command %r from %s", command, ctx.actor_id)
            return Reply.plain(UNKNOWN_COMMAND_REPLY)

        args = list(args)
        if len(args) < spec.min_args:
            return Reply.plain(f"Usage: `{spec.usage}`")

        logger.debug("dispatch %s args=%r actor=%s", spec.name, args, ctx.actor_id)
        try:
            result = spec.handler(ctx, args, self.services)
            if inspect.isawaitable(result):
                result = await asyncio.wait_for(result, timeout=self.timeout_seconds)
        except CoinbotError as exc:
            return Reply.plain(str(exc))
        except asyncio.TimeoutError:
            logger.warning("command %s timed out after %ss", spec.name, self.timeout_seconds)
            return Reply.plain(str(ExternalServiceUnavailable()))
        except Exception:
            logger.exception("command %s failed", spec.name)
            return Reply.plain(GENERIC_FAILURE_REPLY)
        return result

    def help(self, ctx: ActorContext, args: List[Any], services: Services) -> Reply:
        if args:
            spec = self.get(str(args[0]))
            if spec is None:
                return Reply.plain(UNKNOWN_COMMAND_REPLY)
            return Reply.plain(f"`{spec.usage}` - {spec.summary}")

        grouped: Dict[str, List[str]] = {}
        for spec in self._commands.values():
            grouped.setdefault(spec.category, []).append(f"`{spec.usage}` - {spec.summary}")
        fields = [(category, "\n".join(lines)) for category, lines in grouped.items()]
        return Reply.rich("Commands", fields=fields)


def build_router(services: Services, timeout_seconds: float = 15.0) -> CommandRouter:
    """Create a router with every chat command of the bot registered."""

    router = CommandRouter(services=services, timeout_seconds=timeout_seconds)
    specs = [
        # Economy
        CommandSpec("balance", economy.balance, "balance [user]", "Check a balance", aliases=("bal",), category="Economy"),
        CommandSpec("daily", economy.daily, "daily", "Claim your daily coins", category="Economy"),
        CommandSpec("pay", economy.pay, "pay <user> <amount>", "Send coins", min_args=2, category="Economy"),
        CommandSpec("shop", economy.shop, "shop", "Show the shop", category="Economy"),
        CommandSpec("buy", economy.buy, "buy <item>", "Buy an item", min_args=1, category="Economy"),
        CommandSpec("use", economy.use, "use <item>", "Use an item", min_args=1, category="Economy"),
        CommandSpec("inventory", economy.inventory, "inventory [user]", "Show an inventory", aliases=("inv",), category="Economy"),
        CommandSpec("trade", economy.trade, "trade <user> <item>", "Give an item away", min_args=2, category="Economy"),
        CommandSpec("leaderboard", economy.leaderboard, "leaderboard", "Top balances", aliases=("lb", "top"), category="Economy"),
        CommandSpec("gamble", gambling.gamble, gambling.GAMBLE_USAGE, "Gamble coins", min_args=1, category="Economy"),
        # Owner
        CommandSpec("givemoney", economy.give_money, "givemoney <user> <amount>", "(Owner) Give money", min_args=2, category="Owner"),
        CommandSpec("takemoney", economy.take_money, "takemoney <user> <amount>", "(Owner) Take money", min_args=2, category="Owner"),
        # Fun
        CommandSpec("joke", fun.joke, "joke", "Get a random joke"),
        CommandSpec("meme", fun.meme, "meme", "Get a random meme"),
        CommandSpec("cat", fun.cat, "cat", "Get a random cat"),
        CommandSpec("dog", fun.dog, "dog", "Get a random dog"),
        CommandSpec("fact", fun.fact, "fact", "Get a random fact"),
        CommandSpec("quote", fun.quote, "quote", "Get a random quote"),
        CommandSpec("gif", fun.gif, "gif <keyword>", "Search a gif", min_args=1),
        CommandSpec("8ball", fun.eight_ball, "8ball <question>", "Ask the magic 8ball", min_args=1),
        CommandSpec("coinflip", fun.coinflip, "coinflip", "Flip a coin"),
        CommandSpec("roll", fun.roll, "roll [sides]", "Roll a dice"),
        CommandSpec("pick", fun.pick, "pick <a | b | c>", "Pick an option", min_args=1),
        CommandSpec("ping", fun.ping, "ping", "Check bot latency", category="Utility"),
    ]
    for action in fun.INTERACTIONS:
        specs.append(
            CommandSpec(
                action,
                functools.partial(fun.interact, action),
                f"{action} <user>",
                f"{action.capitalize()} a user",
                min_args=1,
                category="Interactive",
            )
        )
    specs.append(CommandSpec("help", router.help, "help [command]", "Show all commands and usage", category="Utility"))

    for spec in specs:
        router.register(spec)
    return router
