from __future__ import annotations

from typing import List

from domain.errors import (
    CoinbotError,
    InsufficientFunds,
    InvalidTarget,
    PermissionDenied,
)
from domain.shop import CATALOG, find_item

from .arguments import parse_amount, parse_user
from .context import ActorContext, Reply, UserRef
from .services import Services


def _name(ctx: ActorContext, ref: UserRef) -> str:
    return ref.display_name or ctx.name_for(ref.id)


def _require_owner(ctx: ActorContext, services: Services) -> None:
    if not services.permissions.has_manage_permission(ctx.actor_id, ctx.guild_id):
        raise PermissionDenied()


def balance(ctx: ActorContext, args: List, services: Services) -> Reply:
    if args:
        target = parse_user(args[0])
        name = _name(ctx, target)
    else:
        target, name = UserRef(id=ctx.actor_id), ctx.display_name
    coins = services.ledger.balance(target.id)
    return Reply.plain(f"{name} has {coins} coins.")


def daily(ctx: ActorContext, args: List, services: Services) -> Reply:
    rules = services.rules
    new_balance = services.ledger.claim_daily(
        ctx.actor_id,
        now=services.clock(),
        cooldown_ms=rules.daily_cooldown_ms,
        reward=rules.daily_reward,
    )
    return Reply.plain(
        f"You claimed {rules.daily_reward} coins! New balance: {new_balance}."
    )


def pay(ctx: ActorContext, args: List, services: Services) -> Reply:
    target = parse_user(args[0])
    amount = parse_amount(args[1])
    services.ledger.transfer(ctx.actor_id, target.id, amount)
    return Reply.plain(f"Paid {amount} coins to {_name(ctx, target)}.")


def shop(ctx: ActorContext, args: List, services: Services) -> Reply:
    fields = [(f"{item.name}", f"{item.price} coins (id: `{item.id}`)") for item in CATALOG]
    return Reply.rich(
        "Shop items",
        description="Use `buy <id>` to purchase an item.",
        fields=fields,
    )


def buy(ctx: ActorContext, args: List, services: Services) -> Reply:
    item = find_item(str(args[0]))
    ledger = services.ledger
    # debit() raises before anything changes when the buyer is short.
    ledger.debit(ctx.actor_id, item.price)
    ledger.add_item(ctx.actor_id, item.id)
    return Reply.plain(f"You bought {item.name}!")


def use(ctx: ActorContext, args: List, services: Services) -> Reply:
    item = find_item(str(args[0]))
    services.ledger.remove_item(ctx.actor_id, item.id)
    return Reply.plain(f"You used {item.name}! (mock perk, ask a moderator to apply it)")


def inventory(ctx: ActorContext, args: List, services: Services) -> Reply:
    if args:
        target = parse_user(args[0])
        name = _name(ctx, target)
    else:
        target, name = UserRef(id=ctx.actor_id), ctx.display_name

    items = services.ledger.get_account(target.id).inventory
    if not items:
        return Reply.plain(f"{name} has no items.")

    counts = {}
    for item_id in items:
        counts[item_id] = counts.get(item_id, 0) + 1
    lines = [f"{item_id} x{count}" for item_id, count in counts.items()]
    return Reply.rich(f"{name}'s inventory", description="\n".join(lines))


def trade(ctx: ActorContext, args: List, services: Services) -> Reply:
    """
    Give one item to another actor.

    The item leaves the giver's inventory before it is added to the
    receiver's; a missing item raises before either changes.
    """

    target = parse_user(args[0])
    item = find_item(str(args[1]))
    if target.id == ctx.actor_id:
        raise InvalidTarget("You can't trade with yourself.")

    ledger = services.ledger
    ledger.remove_item(ctx.actor_id, item.id)
    ledger.add_item(target.id, item.id)
    return Reply.plain(f"You gave {item.name} to {_name(ctx, target)}.")


def leaderboard(ctx: ActorContext, args: List, services: Services) -> Reply:
    top = services.ledger.top_balances(services.rules.leaderboard_size)
    if not top:
        return Reply.plain("Nobody has any coins yet.")

    lines = [
        f"{position}. {ctx.name_for(account.id)}: {account.balance}"
        for position, account in enumerate(top, start=1)
    ]
    return Reply.rich("Leaderboard", description="\n".join(lines))


def give_money(ctx: ActorContext, args: List, services: Services) -> Reply:
    _require_owner(ctx, services)
    target = parse_user(args[0])
    amount = parse_amount(args[1])
    new_balance = services.ledger.credit(target.id, amount)
    return Reply.plain(f"Gave {amount} coins to {_name(ctx, target)} (now {new_balance}).")


def take_money(ctx: ActorContext, args: List, services: Services) -> Reply:
    _require_owner(ctx, services)
    target = parse_user(args[0])
    amount = parse_amount(args[1])
    try:
        new_balance = services.ledger.debit(target.id, amount)
    except InsufficientFunds as exc:
        raise CoinbotError(f"{_name(ctx, target)} only has {exc.balance} coins.") from None
    return Reply.plain(f"Took {amount} coins from {_name(ctx, target)} (now {new_balance}).")
