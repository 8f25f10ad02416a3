import asyncio

from infrastructure.bootstrap import build_application
from infrastructure.config import load_settings
from infrastructure.logging_setup import setup_logging
from interfaces.telegram.handlers import create_telegram_bot


def main() -> None:
    settings = load_settings()
    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    setup_logging(settings.log_level, settings.log_dir)
    router = build_application(settings, "telegram")

    bot = create_telegram_bot(settings.telegram_token, router)
    asyncio.run(bot.infinity_polling())


if __name__ == "__main__":
    main()
