"""Reverse image search client.

Wraps the SauceNAO and IQDB engines and the Imgur host behind one object
holding the API keys and the outbound User-Agent.
"""

import logging
from typing import Mapping, Optional, Union

import config
from engines import IqdbEngine, SauceNaoEngine
from hosting import ImgurHost
from models import IqdbMatch, SauceNaoMatch, SearchOptions, UploadResult

logger = logging.getLogger(__name__)


class ReverseImageClient:
    """
    Find where an image comes from.

    Usage:
        client = ReverseImageClient(saucenao_key="...")
        matches = await client.saucenao("https://example.com/cat.jpg", {"min_similarity": 80})
    """

    def __init__(
        self,
        saucenao_key: Optional[str] = None,
        imgur_key: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.user_agent = user_agent or config.USER_AGENT
        self.timeout = timeout if timeout is not None else config.TIMEOUT

        self._saucenao = SauceNaoEngine(
            api_key=saucenao_key, user_agent=self.user_agent, timeout=self.timeout
        )
        self._iqdb = IqdbEngine(user_agent=self.user_agent, timeout=self.timeout)
        self._imgur = ImgurHost(
            client_id=imgur_key, user_agent=self.user_agent, timeout=self.timeout
        )

    @property
    def has_saucenao_key(self) -> bool:
        return bool(self._saucenao.api_key)

    @property
    def has_imgur_key(self) -> bool:
        return bool(self._imgur.client_id)

    async def saucenao(
        self,
        image,
        options: Union[None, SearchOptions, Mapping[str, object]] = None,
    ) -> list[SauceNaoMatch]:
        """
        Search an image in SauceNAO.

        Args:
            image: path, URL, bytes or binary stream
            options: any of output_type, dbmask, dbmaski, db, numres, hide,
                min_similarity. Unset fields keep their defaults.

        Returns:
            matches at or above min_similarity in SauceNAO's order
        """
        return await self._saucenao.search(image, options)

    async def iqdb(self, image) -> list[IqdbMatch]:
        """Search an image in IQDB."""
        return await self._iqdb.search(image)

    async def upload(self, image_b64: str) -> Union[UploadResult, dict, str]:
        """Upload a base64 image to Imgur. See ImgurHost.upload."""
        return await self._imgur.upload(image_b64)

    async def delete(self, deletehash: str) -> Union[dict, str]:
        """Delete an image uploaded to Imgur by its deletehash."""
        return await self._imgur.delete(deletehash)
