import random
import unittest

from application.context import Reply
from application.router import build_router
from application.services import EconomyRules, OwnerPermissions, Services
from domain.ledger import Ledger
from domain.repositories import ContentKind, ContentProvider, LedgerStore
from infrastructure.config import Settings
from interfaces.discord.handlers import EMBED_TITLE_LIMIT, create_discord_bot, render_reply


class InMemoryLedgerStore(LedgerStore):
    def load(self):
        return {}

    def save(self, accounts) -> None:
        pass


class StaticContentProvider(ContentProvider):
    def __init__(self, results=None):
        self.results = dict(results or {})

    async def fetch_content(self, kind, keyword=None):
        return self.results.get(kind)


class FakeUser:
    id = 100
    name = "alice"
    display_name = "Alice"


class FakeResponse:
    def __init__(self, events):
        self.events = events

    async def defer(self, **kwargs):
        self.events.append(("defer", kwargs))


class FakeFollowup:
    def __init__(self, events):
        self.events = events

    async def send(self, **kwargs):
        self.events.append(("send", kwargs))


class FakeInteraction:
    def __init__(self):
        self.events = []
        self.user = FakeUser()
        self.guild = None
        self.response = FakeResponse(self.events)
        self.followup = FakeFollowup(self.events)


def _build_bot(content=None):
    services = Services(
        ledger=Ledger(InMemoryLedgerStore()),
        content=content or StaticContentProvider(),
        permissions=OwnerPermissions(None),
        rules=EconomyRules(),
        rng=random.Random(7),
    )
    router = build_router(services)
    return router, create_discord_bot(router, Settings())


class DiscordBotTests(unittest.IsolatedAsyncioTestCase):
    async def test_every_router_command_has_a_slash_counterpart(self):
        router, bot = _build_bot()
        slash_names = {command.name for command in bot.tree.get_commands()}
        for spec in router.commands:
            self.assertIn(spec.name, slash_names)
        for name in ("serverinfo", "userinfo", "avatar", "stealemoji"):
            self.assertIn(name, slash_names)

    async def test_prefix_commands_ignore_case(self):
        _, bot = _build_bot()
        self.assertTrue(bot.case_insensitive)
        self.assertIs(bot.get_command("ServerInfo"), bot.get_command("serverinfo"))
        self.assertIsNotNone(bot.get_command("AVATAR"))

    async def test_slash_command_defers_before_answering(self):
        content = StaticContentProvider({ContentKind.JOKE: "Why? Because."})
        _, bot = _build_bot(content)
        interaction = FakeInteraction()

        await bot.tree.get_command("joke").callback(interaction)

        self.assertEqual([event for event, _ in interaction.events], ["defer", "send"])
        self.assertEqual(interaction.events[1][1]["content"], "Why? Because.")

    async def test_interaction_slash_passes_the_target(self):
        _, bot = _build_bot()
        interaction = FakeInteraction()
        target = FakeUser()
        target.id = 200
        target.display_name = "Bob"

        await bot.tree.get_command("hug").callback(interaction, target)

        self.assertEqual(interaction.events[-1][1]["content"], "Alice hugs Bob! 🤗")


class RenderReplyTests(unittest.TestCase):
    def test_long_titles_are_capped(self):
        kwargs = render_reply(Reply.rich("t" * 400, description="body"))
        self.assertEqual(len(kwargs["embed"].title), EMBED_TITLE_LIMIT)
        self.assertEqual(kwargs["embed"].description, "body")

    def test_empty_reply_still_sends_something(self):
        self.assertEqual(render_reply(Reply(text="")), {"content": "Done."})


if __name__ == "__main__":
    unittest.main()
