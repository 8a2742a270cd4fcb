"""Background refresh of the channel configuration.

The directory is loaded synchronously at startup, so the loop waits one
full interval before its first reload.  A failed reload is logged and
retried on the next tick; the previous snapshot keeps being served.
"""

from __future__ import annotations

import asyncio
import logging

from s3channel.core.blob_store import BlobStore
from s3channel.core.directory import ChannelDirectory, load_channels_config
from s3channel.core.errors import ChannelServiceError

logger = logging.getLogger(__name__)


class ConfigRefresher:
    """Periodically reloads the configuration and publishes it.

    Parameters
    ----------
    directory:
        The directory whose snapshot gets replaced.
    store:
        Where ``channels.json`` and the channel descriptors live.
    interval_seconds:
        Delay between the end of one refresh and the start of the next.
    """

    def __init__(
        self,
        directory: ChannelDirectory,
        store: BlobStore,
        interval_seconds: float,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._directory = directory
        self._store = store
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_once(self) -> bool:
        """Reload and publish once.  Returns ``True`` if a snapshot was published."""
        try:
            config = await asyncio.to_thread(load_channels_config, self._store)
        except ChannelServiceError as exc:
            logger.error("Failed to load new config (will try again later): %s", exc)
            return False
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Unexpected error while loading config (will try again later): %s", exc
            )
            return False

        self._directory.publish(config)
        logger.info("Successfully refreshed channel state.")
        return True

    async def run(self) -> None:
        """Refresh forever.  Ticks are strictly sequential."""
        while True:
            await asyncio.sleep(self._interval)
            await self.refresh_once()

    # ------------------------------------------------------------------
    # Task lifecycle
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Schedule ``run()`` on the running event loop."""
        if self.running:
            return self._task  # type: ignore[return-value]
        self._task = asyncio.get_running_loop().create_task(
            self.run(), name="s3channel-config-refresh"
        )
        logger.info("Refreshing channel config every %ss", self._interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
