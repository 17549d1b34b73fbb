"""
Realtime websocket client (Phoenix channel protocol)
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode
import websockets
from insighttask.config.constants import (
    REALTIME_JOIN_TIMEOUT,
    REALTIME_PATH,
    REALTIME_PROTOCOL_VERSION,
    REALTIME_SCHEMA,
)
from insighttask.utils.error_handler import SubscriptionError
from insighttask.utils.logger import logger


def build_realtime_url(base_url: str, api_key: str) -> str:
    """Websocket endpoint for a project URL"""
    ws_url = base_url.rstrip("/").replace("https://", "wss://").replace("http://", "ws://")
    query = urlencode({"apikey": api_key, "vsn": REALTIME_PROTOCOL_VERSION})
    return f"{ws_url}{REALTIME_PATH}?{query}"


class RealtimeClient:
    """One websocket connection carrying one postgres_changes channel"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        connect: Optional[Callable[[str], Awaitable[Any]]] = None,
    ):
        """
        Initialize realtime client

        Args:
            base_url: Project URL
            api_key: Public anon key
            connect: Websocket factory, defaults to websockets.connect
        """
        self.url = build_realtime_url(base_url, api_key)
        self._connect = connect or websockets.connect
        self._websocket: Optional[Any] = None
        self._closed = False
        self._ref = 0
        self.topic: Optional[str] = None
        self.logger = logger

    def _next_ref(self) -> str:
        self._ref += 1
        return str(self._ref)

    async def connect(self) -> None:
        """Open the websocket"""
        try:
            self._websocket = await self._connect(self.url)
        except Exception as e:
            raise SubscriptionError(f"Failed to connect to realtime server: {e}") from e
        self._closed = False
        self.logger.debug("[Realtime] Connected")

    async def send(self, topic: str, event: str, payload: Dict[str, Any]) -> str:
        """
        Send a channel message

        Returns:
            Message ref
        """
        if self._closed or not self._websocket:
            raise SubscriptionError("Connection closed")

        ref = self._next_ref()
        message = {"topic": topic, "event": event, "payload": payload, "ref": ref}
        await self._websocket.send(json.dumps(message))
        return ref

    async def receive(self) -> Dict[str, Any]:
        """Receive the next decoded message"""
        if self._closed or not self._websocket:
            raise SubscriptionError("Connection closed")

        raw = await self._websocket.recv()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SubscriptionError(f"Invalid JSON received: {e}") from e

    async def join(
        self,
        topic: str,
        access_token: str,
        table: str,
        row_filter: str,
    ) -> None:
        """
        Join a channel listening to all changes of one table, filtered
        server-side

        Raises:
            SubscriptionError: If the server rejects the join or does not
                reply in time
        """
        payload = {
            "config": {
                "broadcast": {"ack": False, "self": False},
                "presence": {"key": ""},
                "postgres_changes": [
                    {
                        "event": "*",
                        "schema": REALTIME_SCHEMA,
                        "table": table,
                        "filter": row_filter,
                    }
                ],
                "private": False,
            },
            "access_token": access_token,
        }
        ref = await self.send(topic, "phx_join", payload)

        try:
            reply = await asyncio.wait_for(self._wait_for_reply(ref), REALTIME_JOIN_TIMEOUT)
        except asyncio.TimeoutError as e:
            raise SubscriptionError(f"Join timed out for {topic}") from e

        status = reply.get("payload", {}).get("status")
        if status != "ok":
            raise SubscriptionError(f"Join rejected for {topic}: {reply.get('payload')}")

        self.topic = topic
        self.logger.info(f"[Realtime] Joined {topic}")

    async def _wait_for_reply(self, ref: str) -> Dict[str, Any]:
        while True:
            message = await self.receive()
            if message.get("event") == "phx_reply" and message.get("ref") == ref:
                return message

    async def heartbeat(self) -> None:
        """Keep the connection alive"""
        await self.send("phoenix", "heartbeat", {})

    async def leave(self) -> None:
        """Leave the joined channel"""
        if self.topic and not self._closed and self._websocket:
            await self.send(self.topic, "phx_leave", {})
        self.topic = None

    async def close(self) -> None:
        """Close the websocket connection"""
        if self._closed:
            return

        self._closed = True

        if self._websocket:
            try:
                await self._websocket.close()
            except Exception as e:
                self.logger.warning(f"[Realtime] Error closing websocket: {e}")
            finally:
                self._websocket = None
