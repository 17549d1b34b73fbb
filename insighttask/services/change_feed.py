"""
Change feed subscriber

Holds the single live subscription of a session and publishes tagged
change events onto a queue consumed by the task list reconciler.
"""

import asyncio
from typing import Any, Dict, Optional
from insighttask.api.realtime_client import RealtimeClient
from insighttask.config.constants import REALTIME_HEARTBEAT_INTERVAL, TASKS_TABLE
from insighttask.models.events import ChangeEvent
from insighttask.models.session import Session
from insighttask.utils.logger import logger


class ChangeFeedSubscriber:
    """
    Scoped owner of one session's change feed subscription

    Acquire with ``async with`` when the board view mounts and release on
    unmount or logout. Nothing is published to the queue once teardown has
    begun, including events from a join that resolves after ``stop()``.
    """

    def __init__(
        self,
        realtime: RealtimeClient,
        session: Session,
        queue: "asyncio.Queue[Optional[ChangeEvent]]",
        heartbeat_interval: float = REALTIME_HEARTBEAT_INTERVAL,
    ):
        self.realtime = realtime
        self.session = session
        self.queue = queue
        self.heartbeat_interval = heartbeat_interval
        self.logger = logger
        self._started = False
        self._joined = False
        self._closing = False
        self._active = False
        self._ended = False
        self._reader: Optional[asyncio.Task] = None
        self._heartbeat: Optional[asyncio.Task] = None

    @property
    def topic(self) -> str:
        return f"realtime:tasks-realtime-{self.session.user_id}"

    @property
    def row_filter(self) -> str:
        return f"user_id=eq.{self.session.user_id}"

    @property
    def is_active(self) -> bool:
        """True while live events are being delivered"""
        return self._active

    async def start(self) -> bool:
        """
        Establish the subscription

        Failures are logged and swallowed; the caller keeps working from
        fetch-based loads alone.

        Returns:
            True if the feed is live
        """
        if self._started:
            raise RuntimeError("Change feed already subscribed for this session")
        self._started = True

        if self._closing:
            return False

        try:
            await self.realtime.connect()
            await self.realtime.join(
                self.topic,
                access_token=self.session.access_token,
                table=TASKS_TABLE,
                row_filter=self.row_filter,
            )
        except Exception as e:
            self.logger.error(f"[ChangeFeed] Failed to subscribe to realtime tasks: {e}")
            await self._release()
            return False

        self._joined = True

        if self._closing:
            self.logger.debug("[ChangeFeed] Teardown began during subscribe, discarding channel")
            await self._release()
            return False

        self._reader = asyncio.create_task(self._read_loop())
        self._heartbeat = asyncio.create_task(self._heartbeat_loop())
        self._active = True
        self.logger.info(f"[ChangeFeed] Subscribed to {self.topic}")
        return True

    async def stop(self) -> None:
        """
        Tear down the subscription

        No events are published afterwards. If the feed went live, the None
        end marker is queued so the consumer returns.
        """
        if self._closing:
            return
        self._closing = True
        self._active = False

        pending = [task for task in (self._reader, self._heartbeat) if task is not None]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._reader is not None:
            self._publish_end()

        # A start() still awaiting its join releases the channel itself
        if self._joined:
            await self._release()
        self.logger.info(f"[ChangeFeed] Unsubscribed from {self.topic}")

    async def _release(self) -> None:
        try:
            await self.realtime.leave()
        except Exception as e:
            self.logger.warning(f"[ChangeFeed] Failed to leave channel: {e}")
        await self.realtime.close()

    async def _read_loop(self) -> None:
        try:
            while not self._closing:
                message = await self.realtime.receive()
                if self._closing:
                    break
                self._dispatch(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._closing:
                self._active = False
                self.logger.error(f"[ChangeFeed] Live feed dropped, falling back to manual refresh: {e}")
                self._publish_end()

    def _publish_end(self) -> None:
        if not self._ended:
            self._ended = True
            self.queue.put_nowait(None)

    async def _heartbeat_loop(self) -> None:
        try:
            while not self._closing:
                await asyncio.sleep(self.heartbeat_interval)
                await self.realtime.heartbeat()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.warning(f"[ChangeFeed] Heartbeat failed: {e}")

    def _dispatch(self, message: Dict[str, Any]) -> None:
        event_name = message.get("event")

        if event_name == "postgres_changes":
            data = message.get("payload", {}).get("data", {})
            event = ChangeEvent.from_postgres_change(data)
            if event is None:
                self.logger.warning(f"[ChangeFeed] Ignoring unusable change payload: {data.get('type')}")
                return
            self.logger.debug(f"[ChangeFeed] {event.kind.value} {event.record.id}")
            self.queue.put_nowait(event)

        elif event_name in ("phx_error", "phx_close"):
            self.logger.warning(f"[ChangeFeed] Channel {event_name}: {message.get('payload')}")

    async def __aenter__(self) -> "ChangeFeedSubscriber":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
