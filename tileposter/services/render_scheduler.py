"""Re-render scheduling for interactive callers.

Every configuration change triggers a new render. A newer request always
supersedes the one in flight: the stale asyncio task is cancelled, and if its
worker thread still finishes, the result is dropped instead of published.
Only the latest configuration's tiles ever reach the caller.
"""

import asyncio
import logging
from typing import Optional

from ..models.poster import PosterProject
from ..utils.image_utils import PixelBuffer
from .poster_service import PosterResult, PosterService

logger = logging.getLogger(__name__)


class RenderScheduler:
    """Runs the poster pipeline off the event loop, latest request wins."""

    def __init__(self, debounce_seconds: float = 0.0, max_workers: int = 1):
        """
        Initialize render scheduler.

        Args:
            debounce_seconds: Delay before a render starts, so bursts of
                changes collapse into one run
            max_workers: Threads used for tile rasterization per run
        """
        self.debounce_seconds = debounce_seconds
        self.max_workers = max_workers
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        """Number of render requests seen so far."""
        return self._generation

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self, image: PixelBuffer, project: PosterProject) -> PosterResult:
        if self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
        service = PosterService(project, max_workers=self.max_workers)
        return await asyncio.to_thread(service.split, image)

    async def render(self, image: PixelBuffer, project: PosterProject) -> Optional[PosterResult]:
        """Render a configuration, superseding any render still in flight.

        Returns:
            The result, or None if a newer render superseded this one

        Raises:
            InvalidConfiguration, RasterizationFailure: From the pipeline, for
                the current (not superseded) request only
        """
        self._generation += 1
        generation = self._generation

        if self.busy:
            logger.debug("Superseding render %d", generation - 1)
            self._task.cancel()

        task = asyncio.create_task(self._run(image, project))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return None
            raise
        except Exception:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded render %d", generation)
                return None
            raise
        finally:
            # Finished tasks hold their result; only the caller keeps the tiles
            if self._task is task and task.done():
                self._task = None

        if generation != self._generation:
            logger.debug("Dropping stale result of render %d", generation)
            return None

        return result

    async def cancel(self) -> None:
        """Cancel the render in flight, if any."""
        self._generation += 1
        if self.busy:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
