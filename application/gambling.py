from __future__ import annotations

import logging
from typing import List

from domain.payouts import (
    coin_flip,
    coin_outcome,
    draw_poker_hand,
    evaluate_poker_hand,
    settle,
    slot_outcome,
    slot_spin,
)

from .arguments import BadArgument, parse_amount
from .context import ActorContext, Reply
from .services import Services


logger = logging.getLogger(__name__)

GAME_ALIASES = {
    "coin": "coin",
    "coinflip": "coin",
    "flip": "coin",
    "slots": "slots",
    "slot": "slots",
    "poker": "poker",
}

GAMBLE_USAGE = "gamble <amount> [coin|slots|poker]"


def _resolve_game(args: List) -> str:
    if len(args) < 2 or args[1] is None or str(args[1]).strip() == "":
        return "coin"
    name = str(args[1]).strip().lower()
    game = GAME_ALIASES.get(name)
    if game is None:
        raise BadArgument(f"Unknown game `{name}`. Usage: `{GAMBLE_USAGE}`")
    return game


def gamble(ctx: ActorContext, args: List, services: Services) -> Reply:
    """
    Wager coins on a coin flip, a slot spin or a five-card poker hand.

    The bet is debited before the draw and `settle()` decides how much of
    it comes back. Debit, draw and credit run without awaiting, so no other
    command can observe the ledger in between.
    """

    now = services.clock()
    services.cooldowns.check(ctx.actor_id, now)

    amount = parse_amount(args[0])
    game = _resolve_game(args)

    ledger = services.ledger
    ledger.debit(ctx.actor_id, amount)
    services.cooldowns.record(ctx.actor_id, now)

    convention = services.rules.payout_convention
    rng = services.rng
    if game == "coin":
        outcome = coin_outcome(coin_flip(rng), convention)
        shown = ""
    elif game == "slots":
        spin = slot_spin(rng)
        outcome = slot_outcome(spin)
        shown = " | ".join(spin.symbols)
    else:
        hand = draw_poker_hand(rng)
        outcome = evaluate_poker_hand(hand)
        shown = " ".join(str(card) for card in hand)

    payout = settle(amount, outcome.multiplier, convention)
    if payout > 0:
        ledger.credit(ctx.actor_id, payout)
    new_balance = ledger.balance(ctx.actor_id)
    net = payout - amount

    logger.debug(
        "gamble actor=%s game=%s bet=%d outcome=%s payout=%d",
        ctx.actor_id,
        game,
        amount,
        outcome.label,
        payout,
    )

    if net > 0:
        verdict = f"You won {net} coins!"
    elif net == 0:
        verdict = "You broke even."
    else:
        verdict = f"You lost {-net} coins."

    fields = [("Bet", str(amount)), ("Result", outcome.label), ("Balance", str(new_balance))]
    if shown:
        fields.insert(0, ("Draw", shown))
    return Reply.rich(f"🎲 {game.capitalize()}", description=verdict, fields=fields)
