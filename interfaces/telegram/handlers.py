from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Optional, Tuple

from telebot.async_telebot import AsyncTeleBot
from telebot.asyncio_helper import ApiTelegramException

from application.auto_replies import auto_reply
from application.context import ActorContext, Reply, UserRef
from application.router import CommandRouter


logger = logging.getLogger(__name__)

CAPTION_LIMIT = 1024


def _full_name(user) -> str:
    name = " ".join(p for p in (user.first_name, user.last_name) if p)
    return name or user.username or str(user.id)


def _build_actor_context(message) -> ActorContext:
    """Extract a channel-agnostic context object from a Telegram message."""

    return ActorContext(
        provider="telegram",
        actor_id=str(message.from_user.id),
        display_name=_full_name(message.from_user),
        guild_id=str(message.chat.id),
    )


def split_command(text: str) -> Optional[Tuple[str, List[str]]]:
    """
    Split `/pay@coinbot 123 50` into `("pay", ["123", "50"])`.

    Returns None for messages that are not commands.
    """

    if not text or not text.startswith("/"):
        return None
    parts = text[1:].split()
    if not parts:
        return None
    command = parts[0].split("@", 1)[0].lower()
    if not command:
        return None
    return command, parts[1:]


def _takes_user_first(usage: str) -> bool:
    words = usage.split()
    return len(words) > 1 and words[1] in ("<user>", "[user]")


def create_telegram_bot(bot_token: str, router: CommandRouter) -> AsyncTeleBot:
    """
    Configure and return an AsyncTeleBot wired to the command router.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages and rendering replies. Commands that take a user accept either
    a numeric user ID or a reply to that user's message.
    """

    bot = AsyncTeleBot(bot_token)

    async def send_reply(message, reply: Reply) -> None:
        chat_id = message.chat.id
        image_url = reply.embed.image_url if reply.embed is not None else None
        if image_url:
            without_image = Reply(text=reply.text, embed=replace(reply.embed, image_url=None))
            caption = without_image.as_text()[:CAPTION_LIMIT]
            try:
                if image_url.lower().endswith(".gif"):
                    await bot.send_animation(chat_id, image_url, caption=caption or None)
                else:
                    await bot.send_photo(chat_id, image_url, caption=caption or None)
                return
            except ApiTelegramException as exc:
                logger.warning("Telegram refused media %s: %s", image_url, exc)
        await bot.send_message(chat_id, reply.as_text() or "Done.")

    @bot.message_handler(commands=["start", "hello"])
    async def handle_start(message):
        await bot.send_message(
            message.chat.id,
            "Welcome to coinbot!\n"
            "Use /daily to claim coins and /gamble to lose them.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(content_types=["text"])
    async def handle_text(message):
        if message.from_user is None or message.from_user.is_bot:
            return

        parsed = split_command(message.text)
        if parsed is None:
            text = auto_reply(message.text)
            if text:
                await bot.reply_to(message, text)
            return

        command, raw_args = parsed
        args: List[Any] = list(raw_args)
        spec = router.get(command)
        replied = message.reply_to_message
        if (
            spec is not None
            and replied is not None
            and replied.from_user is not None
            and _takes_user_first(spec.usage)
        ):
            args.insert(0, UserRef(id=str(replied.from_user.id), display_name=_full_name(replied.from_user)))

        reply = await router.dispatch(command, args, _build_actor_context(message))
        await send_reply(message, reply)

    return bot
