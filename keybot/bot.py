"""The key-sharing bot: slash commands backed by a KeyStore."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import aiohttp

from keybot.embed import EMBED_COLOR, Embed, send_embed
from keybot.gateway import DiscordClient, DiscordError
from keybot.store import GameKey, KeyStore

INTERACTION_APPLICATION_COMMAND = 2
INTERACTION_MODAL_SUBMIT = 5
RESPONSE_CHANNEL_MESSAGE = 4
RESPONSE_MODAL = 9
MESSAGE_FLAGS_EPHEMERAL = 1 << 6
COMPONENT_ACTION_ROW = 1
COMPONENT_TEXT_INPUT = 4
TEXT_INPUT_SHORT = 1
OPTION_STRING = 3
RESULTS_PER_MESSAGE = 20

COMMANDS: list[dict[str, Any]] = [
    {"name": "add", "description": "Add a game key"},
    {
        "name": "search",
        "description": "Search game database",
        "options": [
            {
                "type": OPTION_STRING,
                "name": "search",
                "description": "Thing you are searching for",
                "required": True,
            }
        ],
    },
    {
        "name": "take",
        "description": "Take a game key",
        "options": [
            {
                "type": OPTION_STRING,
                "name": "game",
                "description": "Name of game to take",
                "required": True,
            }
        ],
    },
    {"name": "list", "description": "List all games in database"},
]

_REDEEM_LINKS = {
    "Steam": "https://store.steampowered.com/account/registerkey?key=",
    "GOG": "https://www.gog.com/redeem/",
}


@dataclass
class Config:
    """Bot settings read from a JSON file."""

    token: str = ""
    db_file: str = ""
    guild_id: str = ""
    app_id: str = ""

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Read settings; keys are matched without regard to case."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a JSON object")
        fields = {str(k).lower(): v for k, v in raw.items()}
        return cls(
            token=str(fields.get("token") or ""),
            db_file=str(fields.get("dbfile") or ""),
            guild_id=str(fields.get("guildid") or ""),
            app_id=str(fields.get("appid") or ""),
        )


def _field_embed(name: str, value: str) -> dict[str, Any]:
    return Embed().add_field(name, value).set_color(EMBED_COLOR).to_dict()


def _message(embeds: list[dict[str, Any]], ephemeral: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {"embeds": embeds}
    if ephemeral:
        data["flags"] = MESSAGE_FLAGS_EPHEMERAL
    return {"type": RESPONSE_CHANNEL_MESSAGE, "data": data}


def _chunks(lines: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(lines), size):
        yield lines[start : start + size]


def _user(interaction: dict[str, Any]) -> dict[str, Any]:
    return interaction.get("user") or interaction["member"]["user"]


def _option_value(interaction: dict[str, Any]) -> str:
    return str(interaction["data"]["options"][0]["value"])


def _text_input(data: dict[str, Any], row: int) -> str:
    return data["components"][row]["components"][0]["value"]


class KeyBot:
    """Answers the add, search, take and list commands."""

    def __init__(self, config: Config, client: Any, store: KeyStore) -> None:
        self.config = config
        self.client = client
        self.store = store
        self.initialized = False
        self._command_ids: dict[str, str] = {}

    async def handle_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Route a gateway event to its handler."""
        if event_type == "READY":
            await self.handle_ready(data)
        elif event_type == "INTERACTION_CREATE":
            await self.handle_interaction(data)

    async def handle_ready(self, event: dict[str, Any]) -> None:
        """Check on the first ready event that the bot belongs to a server."""
        if self.initialized:
            return
        if not event.get("guilds"):
            print(
                "Error: No servers returned from discord. "
                "Make sure to invite your bot to your server first",
                file=sys.stderr,
            )
            print(
                "Error: Generate an invite with the bot scope for your bot's "
                "client id in your developer portal",
                file=sys.stderr,
            )
            raise SystemExit(4)
        self.initialized = True

    async def handle_interaction(self, interaction: dict[str, Any]) -> None:
        """Dispatch a slash command or a submitted modal."""
        kind = interaction.get("type")
        if kind == INTERACTION_APPLICATION_COMMAND:
            handlers = {
                "add": self.add,
                "take": self.take,
                "search": self.search,
                "list": self.list,
            }
            handler = handlers.get(interaction["data"]["name"])
            if handler is not None:
                await handler(interaction)
        elif kind == INTERACTION_MODAL_SUBMIT:
            await self.handle_modal_submit(interaction)

    async def handle_modal_submit(self, interaction: dict[str, Any]) -> None:
        """Store the key entered in the add form and thank the donor."""
        data = interaction["data"]
        custom_id = data["custom_id"]
        if not custom_id.startswith("add"):
            return
        user_id = custom_id.split("_")[1]
        member = await self.client.guild_member(self.config.guild_id, user_id)
        username = member["user"]["username"]
        game = _text_input(data, 0)
        count = self.store.add_game(game, _text_input(data, 1), username)
        if count > 0:
            embed = (
                Embed()
                .set_title(f"All Praise {username}")
                .set_color(EMBED_COLOR)
                .set_description(
                    f"Thanks {username} for adding a key for {game}. "
                    f"There are now {count} keys for {game}"
                )
            )
        else:
            embed = Embed().add_field("Already In Database", "Key already exists in the database")
        await self.client.interaction_respond(
            interaction, _message([embed.to_dict()], ephemeral=False)
        )

    async def add(self, interaction: dict[str, Any]) -> None:
        """Show the form for donating a key."""
        await self.client.interaction_respond(
            interaction,
            {
                "type": RESPONSE_MODAL,
                "data": {
                    "custom_id": f"add_{_user(interaction)['id']}",
                    "title": "Add Game",
                    "components": [
                        {
                            "type": COMPONENT_ACTION_ROW,
                            "components": [
                                {
                                    "type": COMPONENT_TEXT_INPUT,
                                    "custom_id": "gamename",
                                    "label": "Name of Game",
                                    "style": TEXT_INPUT_SHORT,
                                    "required": True,
                                    "max_length": 1000,
                                    "min_length": 3,
                                }
                            ],
                        },
                        {
                            "type": COMPONENT_ACTION_ROW,
                            "components": [
                                {
                                    "type": COMPONENT_TEXT_INPUT,
                                    "custom_id": "key",
                                    "label": "Game Key",
                                    "style": TEXT_INPUT_SHORT,
                                    "required": True,
                                    "max_length": 2000,
                                }
                            ],
                        },
                    ],
                },
            },
        )

    async def _send_results(self, interaction: dict[str, Any], lines: list[str]) -> None:
        for chunk in _chunks(lines, RESULTS_PER_MESSAGE):
            value = "".join(f"{line}\n" for line in chunk)
            await self.client.followup_message_create(
                interaction,
                {
                    "embeds": [_field_embed("Search Results", value)],
                    "flags": MESSAGE_FLAGS_EPHEMERAL,
                },
            )

    async def search(self, interaction: dict[str, Any]) -> None:
        """Reply privately with the games whose names contain the query."""
        self.store.load()
        if not len(self.store):
            await self.client.interaction_respond(
                interaction, _message([_field_embed("Empty Database", "No Games in Database")])
            )
            return
        results = self.store.search(_option_value(interaction))
        if not results:
            await self.client.interaction_respond(
                interaction, _message([_field_embed("Search Results", "No Matches Found")])
            )
            return
        await self.client.interaction_respond(
            interaction, _message([_field_embed("Search Results", ".....")])
        )
        await self._send_results(interaction, results)

    async def take(self, interaction: dict[str, Any]) -> None:
        """Hand out the oldest key for a game and announce it."""
        query = _option_value(interaction)
        result = self.store.take(query)
        if result is None:
            await self.client.interaction_respond(
                interaction,
                _message(
                    [
                        _field_embed(
                            "WHY U DO DIS?", f"{query} doesn't exist you cheeky bastard!"
                        )
                    ],
                    ephemeral=False,
                ),
            )
            return
        key, remaining = result
        key_field = (
            f"{key.game_name} ({key.service_type}): {key.serial}\n"
            f"This game was brought to you by {key.author}"
        )
        link = self._redeem_link(key)
        embeds = [_field_embed("Here Is your key", key_field)]
        if link:
            embeds.append(_field_embed(f"{key.service_type} Redeem Link", link))
        await self.client.interaction_respond(interaction, _message(embeds))

        user = _user(interaction)
        await self.client.followup_message_create(
            interaction,
            {
                "embeds": [
                    _field_embed(
                        "Another Satisfied Customer",
                        f"{user['username']} has just taken a key for {key.game_name}. "
                        f"There are {remaining} keys remaining",
                    )
                ]
            },
        )

        try:
            channel = await self.client.create_dm_channel(user["id"])
        except (DiscordError, aiohttp.ClientError):
            return
        await send_embed(self.client, channel["id"], "", "Here is your key", key_field)
        if link:
            await send_embed(self.client, channel["id"], "", "Redeem Link", link)

    @staticmethod
    def _redeem_link(key: GameKey) -> str:
        prefix = _REDEEM_LINKS.get(key.service_type)
        return f"{prefix}{key.serial}" if prefix else ""

    async def register_commands(self) -> None:
        """Create the slash commands, remembering their ids."""
        for command in COMMANDS:
            created = await self.client.create_command(
                self.config.app_id, self.config.guild_id, command
            )
            self._command_ids[created["id"]] = created["name"]

    async def unregister_commands(self) -> None:
        """Delete the slash commands created by register_commands."""
        for command_id in self._command_ids:
            await self.client.delete_command(
                self.config.app_id, self.config.guild_id, command_id
            )
        self._command_ids.clear()

    async def list(self, interaction: dict[str, Any]) -> None:
        """Reply privately with every game and its key count."""
        text, count = self.store.list_keys()
        header = (
            Embed()
            .set_title("Game List")
            .add_field("Total Games", str(count))
            .set_color(EMBED_COLOR)
            .to_dict()
        )
        await self.client.interaction_respond(interaction, _message([header]))
        await self._send_results(interaction, text.splitlines())


async def _serve(config: Config, store: KeyStore) -> None:
    client = DiscordClient(config.token)
    bot = KeyBot(config, client, store)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    try:
        await bot.register_commands()
        print("Bot is now running.  Press CTRL-C to exit.")
        await client.run(bot.handle_event, stop)
        await bot.unregister_commands()
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    """Run the bot with the configuration named by -c."""
    parser = argparse.ArgumentParser(prog="keybot", description="Share game keys on Discord.")
    parser.add_argument("-c", dest="config", default="", help="Configuration file location")
    args = parser.parse_args(argv)

    if not args.config:
        print("No config file entered")
        return 1
    path = Path(args.config)
    if not path.exists():
        print("Configfile does not exist, you should make one")
        return 2
    try:
        config = Config.from_file(path)
    except ValueError as exc:
        print("error: ", exc)
        return 3

    db_path = Path(config.db_file)
    if not db_path.exists():
        print("Db File does not exist, creating")
        db_path.touch()
    store = KeyStore(db_path)
    store.load()
    store.check()

    asyncio.run(_serve(config, store))
    return 0


if __name__ == "__main__":
    sys.exit(main())