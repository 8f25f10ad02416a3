from infrastructure.bootstrap import build_application
from infrastructure.config import load_settings
from infrastructure.logging_setup import setup_logging
from interfaces.discord.handlers import create_discord_bot


def main() -> None:
    settings = load_settings()
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    setup_logging(settings.log_level, settings.log_dir)
    router = build_application(settings, "discord")

    bot = create_discord_bot(router, settings)
    # Logging is already configured; stop discord.py from installing its own handler.
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
