"""A small asynchronous Discord client: REST calls and the event gateway."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sys
from enum import IntEnum
from typing import Any, Awaitable, Callable

import aiohttp

from keybot.embed import Embed

log = logging.getLogger(__name__)

API_BASE = "https://discord.com/api/v10"
GATEWAY_VERSION = 10
INTENT_GUILDS = 1 << 0

EventHandler = Callable[[str, dict[str, Any]], Awaitable[Any]]


class Opcode(IntEnum):
    """Gateway operation codes used by the client."""

    DISPATCH = 0
    HEARTBEAT = 1
    IDENTIFY = 2
    RECONNECT = 7
    INVALID_SESSION = 9
    HELLO = 10
    HEARTBEAT_ACK = 11


class DiscordError(Exception):
    """A REST call was answered with an error status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message


class GatewayError(Exception):
    """The gateway sent something the client cannot follow."""


class DiscordClient:
    """Talks to Discord's REST API and receives gateway events."""

    def __init__(self, token: str) -> None:
        self.token = token
        self.api_base = API_BASE
        self._session: aiohttp.ClientSession | None = None
        self._sequence: int | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        session = self._get_session()
        async with session.request(
            method,
            f"{self.api_base}{path}",
            json=payload,
            params=params,
            headers={"Authorization": f"Bot {self.token}"},
        ) as resp:
            body = await resp.text()
            if resp.status >= 400:
                raise DiscordError(resp.status, body)
            return json.loads(body) if body else None

    async def interaction_respond(
        self, interaction: dict[str, Any], response: dict[str, Any]
    ) -> Any:
        """Send the initial response to an interaction."""
        return await self._request(
            "POST",
            f"/interactions/{interaction['id']}/{interaction['token']}/callback",
            response,
        )

    async def followup_message_create(
        self, interaction: dict[str, Any], params: dict[str, Any]
    ) -> Any:
        """Send a follow-up message to an interaction and return it."""
        return await self._request(
            "POST",
            f"/webhooks/{interaction['application_id']}/{interaction['token']}",
            params,
            params={"wait": "true"},
        )

    async def create_dm_channel(self, user_id: str) -> dict[str, Any]:
        """Open (or fetch) the direct-message channel with a user."""
        return await self._request("POST", "/users/@me/channels", {"recipient_id": user_id})

    async def guild_member(self, guild_id: str, user_id: str) -> dict[str, Any]:
        """Fetch a member of a guild."""
        return await self._request("GET", f"/guilds/{guild_id}/members/{user_id}")

    def _commands_path(self, app_id: str, guild_id: str) -> str:
        if guild_id:
            return f"/applications/{app_id}/guilds/{guild_id}/commands"
        return f"/applications/{app_id}/commands"

    async def create_command(
        self, app_id: str, guild_id: str, command: dict[str, Any]
    ) -> dict[str, Any]:
        """Register an application command and return it as created."""
        return await self._request("POST", self._commands_path(app_id, guild_id), command)

    async def delete_command(self, app_id: str, guild_id: str, command_id: str) -> None:
        """Remove an application command."""
        await self._request(
            "DELETE", f"{self._commands_path(app_id, guild_id)}/{command_id}"
        )

    async def send_channel_embed(self, channel_id: str, embed: Embed) -> Any:
        """Post a message holding one embed to a channel."""
        return await self._request(
            "POST", f"/channels/{channel_id}/messages", {"embeds": [embed.to_dict()]}
        )

    async def run(self, on_event: EventHandler, stop: asyncio.Event) -> None:
        """Receive gateway events and pass them to on_event until stop is set."""
        info = await self._request("GET", "/gateway/bot")
        url = f"{info['url']}?v={GATEWAY_VERSION}&encoding=json"
        session = self._get_session()
        while not stop.is_set():
            async with session.ws_connect(url) as ws:
                if not await self._serve(ws, on_event, stop):
                    return

    def _identify(self) -> dict[str, Any]:
        return {
            "op": Opcode.IDENTIFY,
            "d": {
                "token": self.token,
                "intents": INTENT_GUILDS,
                "properties": {"os": sys.platform, "browser": "keybot", "device": "keybot"},
            },
        }

    async def _serve(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        on_event: EventHandler,
        stop: asyncio.Event,
    ) -> bool:
        """Run one gateway connection; return True if it should be reopened."""
        hello = await ws.receive()
        if hello.type != aiohttp.WSMsgType.TEXT:
            raise GatewayError(f"expected hello, got {hello.type!r}")
        payload = hello.json()
        if payload.get("op") != Opcode.HELLO:
            raise GatewayError(f"expected hello, got opcode {payload.get('op')}")
        interval = payload["d"]["heartbeat_interval"] / 1000

        self._sequence = None
        await ws.send_json(self._identify())
        tasks = [
            asyncio.create_task(self._heartbeat(ws, interval)),
            asyncio.create_task(self._close_on(stop, ws)),
        ]
        try:
            async for msg in ws:
                if msg.type != aiohttp.WSMsgType.TEXT:
                    continue
                payload = msg.json()
                if payload.get("s") is not None:
                    self._sequence = payload["s"]
                op = payload.get("op")
                if op == Opcode.DISPATCH:
                    try:
                        await on_event(payload["t"], payload.get("d") or {})
                    except Exception:
                        log.exception("handler for %s failed", payload["t"])
                elif op == Opcode.HEARTBEAT:
                    await ws.send_json({"op": Opcode.HEARTBEAT, "d": self._sequence})
                elif op in (Opcode.RECONNECT, Opcode.INVALID_SESSION):
                    return True
            return not stop.is_set()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _heartbeat(self, ws: aiohttp.ClientWebSocketResponse, interval: float) -> None:
        while not ws.closed:
            await asyncio.sleep(interval)
            with contextlib.suppress(ConnectionError):
                await ws.send_json({"op": Opcode.HEARTBEAT, "d": self._sequence})

    @staticmethod
    async def _close_on(stop: asyncio.Event, ws: aiohttp.ClientWebSocketResponse) -> None:
        await stop.wait()
        await ws.close()

    async def close(self) -> None:
        """Release the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None