from __future__ import annotations

import logging
from typing import List, Optional

from domain.errors import ExternalServiceUnavailable, InvalidTarget
from domain.repositories import ContentKind

from .arguments import BadArgument, parse_user
from .context import ActorContext, Reply
from .services import Services


logger = logging.getLogger(__name__)

EIGHT_BALL_ANSWERS = (
    "It is certain.",
    "Without a doubt.",
    "Yes, definitely.",
    "Most likely.",
    "Outlook good.",
    "Reply hazy, try again.",
    "Ask again later.",
    "Cannot predict now.",
    "Don't count on it.",
    "My sources say no.",
    "Very doubtful.",
)

INTERACTIONS = {
    "hug": ("anime hug", "{actor} hugs {target}! 🤗"),
    "slap": ("anime slap", "{actor} slaps {target}! 👋"),
    "highfive": ("anime high five", "{actor} high-fives {target}! ✋"),
    "touch": ("anime poke", "{actor} touches {target}. 👉"),
}

NO_RESULT = "Couldn't find anything this time, try again!"


async def _fetch(
    services: Services,
    kind: ContentKind,
    keyword: Optional[str] = None,
) -> Optional[str]:
    logger.debug("fetching %s content keyword=%r", kind.value, keyword)
    return await services.content.fetch_content(kind, keyword)


async def joke(ctx: ActorContext, args: List, services: Services) -> Reply:
    text = await _fetch(services, ContentKind.JOKE)
    return Reply.plain(text or "I'm out of jokes right now. 😅")


async def fact(ctx: ActorContext, args: List, services: Services) -> Reply:
    text = await _fetch(services, ContentKind.FACT)
    return Reply.plain(f"📚 {text}" if text else NO_RESULT)


async def quote(ctx: ActorContext, args: List, services: Services) -> Reply:
    text = await _fetch(services, ContentKind.QUOTE)
    return Reply.plain(f"💬 {text}" if text else NO_RESULT)


async def meme(ctx: ActorContext, args: List, services: Services) -> Reply:
    url = await _fetch(services, ContentKind.MEME)
    if not url:
        return Reply.plain("No memes today. 😢")
    return Reply.rich("Here's a meme", image_url=url)


async def cat(ctx: ActorContext, args: List, services: Services) -> Reply:
    url = await _fetch(services, ContentKind.CAT)
    if not url:
        return Reply.plain("The cats are hiding. 🐱")
    return Reply.rich("🐱 Meow", image_url=url)


async def dog(ctx: ActorContext, args: List, services: Services) -> Reply:
    url = await _fetch(services, ContentKind.DOG)
    if not url:
        return Reply.plain("The dogs are out for a walk. 🐶")
    return Reply.rich("🐶 Woof", image_url=url)


async def gif(ctx: ActorContext, args: List, services: Services) -> Reply:
    keyword = " ".join(str(a) for a in args).strip()
    url = await _fetch(services, ContentKind.GIF, keyword)
    if not url:
        return Reply.plain(f"No gif found for `{keyword}`.")
    return Reply.rich("GIF", description=keyword, image_url=url)


async def interact(action: str, ctx: ActorContext, args: List, services: Services) -> Reply:
    """
    Hug/slap/high-five/touch another actor, with a GIF when one is found.

    A missing or unavailable GIF degrades to the text line alone.
    """

    keyword, template = INTERACTIONS[action]
    target = parse_user(args[0])
    if target.id == ctx.actor_id:
        raise InvalidTarget(f"You can't {action} yourself... or can you? 🤔")

    line = template.format(
        actor=ctx.display_name,
        target=target.display_name or ctx.name_for(target.id),
    )
    try:
        url = await _fetch(services, ContentKind.GIF, keyword)
    except ExternalServiceUnavailable as exc:
        logger.warning("gif lookup for %s failed: %s", action, exc)
        url = None
    if not url:
        return Reply.plain(line)
    return Reply.rich(line, image_url=url)


def eight_ball(ctx: ActorContext, args: List, services: Services) -> Reply:
    question = " ".join(str(a) for a in args).strip()
    answer = services.rng.choice(EIGHT_BALL_ANSWERS)
    return Reply.plain(f"🎱 {question}\n{answer}")


def coinflip(ctx: ActorContext, args: List, services: Services) -> Reply:
    side = "Heads" if services.rng.random() < 0.5 else "Tails"
    return Reply.plain(f"🪙 {side}!")


def roll(ctx: ActorContext, args: List, services: Services) -> Reply:
    sides = 6
    if args:
        try:
            sides = int(str(args[0]))
        except ValueError:
            raise BadArgument("Usage: `roll [sides]`") from None
        if sides < 2:
            raise BadArgument("A die needs at least 2 sides.")
    return Reply.plain(f"🎲 You rolled a {services.rng.randint(1, sides)}.")


def pick(ctx: ActorContext, args: List, services: Services) -> Reply:
    options = [o.strip() for o in " ".join(str(a) for a in args).split("|")]
    options = [o for o in options if o]
    if not options:
        raise BadArgument("Usage: `pick option one | option two`")
    return Reply.plain(f"I pick: **{services.rng.choice(options)}**")


def ping(ctx: ActorContext, args: List, services: Services) -> Reply:
    if ctx.latency_ms is None:
        return Reply.plain("Pong!")
    return Reply.plain(f"Pong! {round(ctx.latency_ms)}ms")
