"""Base engine class for reverse image search services."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

import config
from errors import UpstreamError
from image_input import ImageSource

logger = logging.getLogger(__name__)


class BaseEngine(ABC):
    """
    Abstract base class for reverse image search engines.

    Each engine posts an image to one upstream service and turns
    whatever comes back into a list of match records.
    """

    engine_name: str = "unknown"
    endpoint: str = ""

    def __init__(self, user_agent: Optional[str] = None, timeout: Optional[float] = None):
        self.user_agent = user_agent or config.USER_AGENT
        self.timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else config.TIMEOUT)

    @abstractmethod
    async def search(self, image, *args, **kwargs) -> list:
        """
        Search for the given image.

        Must be implemented by subclasses.

        Args:
            image: path, URL, bytes, binary stream or ImageSource

        Returns:
            list of match records in upstream order
        """
        pass

    async def _post_image(self, image: ImageSource, fields=()) -> tuple[int, str, str]:
        """
        Post ``fields`` plus the image as a form to the engine endpoint.

        Returns:
            (status, reason, body text)
        """
        form = aiohttp.FormData(default_to_multipart=True)
        for name, value in fields:
            form.add_field(name, value)

        async with image.attach(form):
            return await self._post_form(form)

    async def _post_form(self, form) -> tuple[int, str, str]:
        headers = {"User-Agent": self.user_agent}

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.endpoint, data=form, headers=headers) as response:
                    body = await response.text()
                    return response.status, response.reason or "", body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{self.engine_name} request failed: {e!r}")
            raise UpstreamError(0, str(e) or type(e).__name__) from e
