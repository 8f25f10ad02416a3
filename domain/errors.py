from __future__ import annotations


class CoinbotError(Exception):
    """
    Base class for failures that are reported back to the invoking actor.

    The message is user facing; the interface layer sends it verbatim.
    """


class InvalidAmount(CoinbotError):
    def __init__(self, message: str = "Amount must be a positive whole number.") -> None:
        super().__init__(message)


class InsufficientFunds(CoinbotError):
    def __init__(self, balance: int, required: int) -> None:
        self.balance = balance
        self.required = required
        super().__init__(f"Not enough coins. You have {balance}, need {required}.")


class InvalidTarget(CoinbotError):
    def __init__(self, message: str = "You can't do that to yourself.") -> None:
        super().__init__(message)


class CooldownActive(CoinbotError):
    def __init__(self, remaining_ms: int, action: str = "that") -> None:
        self.remaining_ms = remaining_ms
        super().__init__(
            f"Slow down! You can do {action} again in {format_duration(remaining_ms)}."
        )


class ItemNotOwned(CoinbotError):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"You don't own `{item_id}`.")


class UnknownItem(CoinbotError):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__("Item not found.")


class UnknownCommand(CoinbotError):
    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__("Unknown command. Try `help`.")


class PermissionDenied(CoinbotError):
    def __init__(self) -> None:
        super().__init__("Only the bot owner can do that.")


class ExternalServiceUnavailable(CoinbotError):
    def __init__(self, service: str = "The service") -> None:
        self.service = service
        super().__init__(f"{service} is unavailable right now, try again later.")


class PersistenceFailure(CoinbotError):
    def __init__(self, message: str = "Failed to save data.") -> None:
        super().__init__(message)


def format_duration(ms: int) -> str:
    seconds = max(0, -(-ms // 1000))
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
