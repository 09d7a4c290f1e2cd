# keybot

A Discord bot for a community pool of game keys. Members add keys they do
not need, and others browse the pool and take one. The keys are kept in a
small JSON file on disk.

## Commands in Discord

The bot registers four slash commands on your server when it starts and
removes them again when it stops:

- `/add` opens a form that asks for the name of the game and the key. The
  bot recognises the service from the shape of the key (GOG, Steam, PS3,
  Uplay, Origin, or a gift link starting with `http`; anything else is
  "Unknown"). A key that is already in the pool for that game is refused.
- `/search <search>` lists every game whose name contains the search text,
  ignoring case and spaces, with the number of keys for each. Results come
  as private messages of up to 20 games each.
- `/list` lists every game in the pool with the number of keys for each,
  in private messages of up to 20 games each.
- `/take <game>` hands you the oldest key for that game in a private reply
  and, where Discord allows it, a direct message, with a redeem link for
  Steam and GOG keys. The channel is told that a key was taken and how many
  remain. A game whose last key is taken leaves the pool.

Game names are matched in lower case with spaces removed, so
`Half Life` and `halflife` are the same game.

## Installing

```
pip install .
```

## Configuration

The bot reads a JSON configuration file (key names are matched without
regard to case):

```json
{
  "Token": "token",
  "DbFile": "keys.db",
  "GuildID": "123456789012345678",
  "AppID": "876543210987654321"
}
```

- `Token` is your bot's token from the developer portal.
- `DbFile` is where the keys are stored. It is created if it is missing.
- `GuildID` is the server the commands are registered on.
- `AppID` is your application's identifier.

Invite the bot to your server before starting it; it stops with exit
status 4 if Discord reports no servers for it.

## Running the bot

```
keybot -c config.json
```

`keybot` exits with status 1 if no `-c` is given, 2 if the file does not
exist and 3 if it is not a JSON object. It runs until it receives Ctrl-C or
a termination signal, then deletes the slash commands it created.

## Maintaining the key file

`keybot-db` acts on the keys added by one author. It works on `keys.db` in
the current directory unless another file is named with `-db`. Without
`-author` it does nothing.

Print every game and key that an author added:

```
keybot-db -author=alice -p
```

Remove every key that an author added, dropping games that have no keys
left:

```
keybot-db -author=alice -d -db keys.db
```

## Using it from Python

- `keybot.keys` recognises key formats (`service_type`, `is_steam`,
  `is_gog` and the like) and normalises names (`normalize_game`).
- `keybot.store.KeyStore` holds the pool: `add_game`, `take`, `search`,
  `list_keys`, `load`, `save` and `check` (fills in missing service types).
  `load_db` and `save_db` read and write the JSON file directly.
- `keybot.embed.Embed` builds Discord embeds with chainable setters and
  `to_dict()`.
- `keybot.gateway.DiscordClient` is the small Discord client the bot runs
  on; `keybot.bot.KeyBot` answers the commands.

## What it does not do

The Discord client handles only what this bot needs: it reacts to ready
and interaction events, reconnects with a fresh session when Discord asks
it to, and does not resume sessions, shard or honour rate limits.

## Running the tests

```
pip install ".[test]"
pytest
```