import json
import logging
import threading
import time
from typing import Callable, Optional

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from scriptboard.core.config import settings
from scriptboard.core.errors import RealtimeUnavailableError
from scriptboard.core.redis import get_redis_client
from scriptboard.schemas.realtime import ScriptDataEvent
from scriptboard.services.realtime import project_channel

logger = logging.getLogger(__name__)


class RealtimeSubscriber:
    """
    Listens for script data events of one project over redis pub/sub.

    Reconnects after a dropped connection at most `reconnect_attempts` times
    in a row, waiting a fixed `reconnect_interval` between tries; a
    successful subscribe resets the count.
    """

    def __init__(
        self,
        project_id: int,
        handler: Callable[[ScriptDataEvent], None],
        *,
        redis_factory: Callable[[], Optional[Redis]] = get_redis_client,
        reconnect_attempts: Optional[int] = None,
        reconnect_interval: Optional[float] = None,
        poll_interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.project_id = project_id
        self._handler = handler
        self._redis_factory = redis_factory
        self.reconnect_attempts = (
            settings.REALTIME_RECONNECT_ATTEMPTS if reconnect_attempts is None else reconnect_attempts
        )
        self.reconnect_interval = (
            settings.REALTIME_RECONNECT_INTERVAL_SECONDS if reconnect_interval is None else reconnect_interval
        )
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._stop = threading.Event()
        self.connection_attempts = 0

    def stop(self) -> None:
        self._stop.set()

    def _dispatch(self, data) -> None:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            event = ScriptDataEvent.model_validate(json.loads(data))
        except ValueError as e:
            logger.warning("[Realtime] ignoring malformed message on project %s: %s", self.project_id, e)
            return
        self._handler(event)

    def _listen_once(self) -> None:
        client = self._redis_factory()
        if client is None:
            raise RealtimeUnavailableError("REDIS_URL is not configured")

        pubsub = client.pubsub(ignore_subscribe_messages=True)
        try:
            pubsub.subscribe(project_channel(self.project_id))
            self.connection_attempts = 0
            logger.info("[Realtime] subscribed to project %s", self.project_id)

            # poll so stop() is honoured on an idle channel too
            while not self._stop.is_set():
                message = pubsub.get_message(timeout=self.poll_interval)
                if message is None or message.get("type") != "message":
                    continue
                self._dispatch(message["data"])
        finally:
            pubsub.close()

    def run(self) -> None:
        """Blocks until stop() is called or reconnects run out."""
        while not self._stop.is_set():
            try:
                self._listen_once()
                return
            except (RedisConnectionError, RedisTimeoutError) as e:
                self.connection_attempts += 1
                if self.connection_attempts > self.reconnect_attempts:
                    raise RealtimeUnavailableError(
                        f"gave up after {self.reconnect_attempts} reconnect attempts: {e}"
                    ) from e

                logger.warning(
                    "[Realtime] connection lost (%s), reconnect %d/%d in %.1fs",
                    e, self.connection_attempts, self.reconnect_attempts, self.reconnect_interval,
                )
                self._sleep(self.reconnect_interval)

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name=f"realtime-{self.project_id}", daemon=True)
        thread.start()
        return thread
