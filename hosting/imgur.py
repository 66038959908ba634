"""Imgur image hosting, used to get a public URL for a local image.

API: https://apidocs.imgur.com/
Anonymous uploads only need an application Client-ID.
"""

import asyncio
import json
import logging
from typing import Optional, Union

import aiohttp

import config
from errors import MissingCredentialError, UpstreamError
from models import UploadResult

logger = logging.getLogger(__name__)

MISSING_CLIENT_ID_MESSAGE = (
    "To upload images to imgur you need your own client id. "
    "Register an application at https://api.imgur.com/oauth2/addclient "
    "and use its Client-ID."
)


def _error_message(payload) -> str:
    if not isinstance(payload, dict):
        return str(payload)
    data = payload.get("data")
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("message") or json.dumps(error)
    return error or str(payload)


class ImgurHost:
    """
    Anonymous Imgur uploads.

    Uploaded images can only be removed with the returned deletehash,
    so callers have to keep it.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client_id = client_id if client_id is not None else config.IMGUR_CLIENT_ID
        self.base_url = config.IMGUR_IMAGE_URL
        self.user_agent = user_agent or config.USER_AGENT
        self.timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else config.TIMEOUT)

    async def upload(self, image_b64: str) -> Union[UploadResult, dict, str]:
        """
        Upload a base64 encoded image.

        Returns:
            UploadResult on a 2xx reply. Any other non-success status that is
            not 401 or 403 returns the raw upstream payload unchanged.

        Raises:
            MissingCredentialError: no client id, or imgur answered 401
            UpstreamError: imgur answered 403
        """
        if not self.client_id:
            raise MissingCredentialError(MISSING_CLIENT_ID_MESSAGE)

        status, reason, payload = await self._request(
            "post", self.base_url, data={"image": image_b64, "type": "base64"}
        )

        if status == 401:
            logger.warning("Imgur rejected the request as unauthenticated")
            raise MissingCredentialError(MISSING_CLIENT_ID_MESSAGE)
        if status == 403:
            message = _error_message(payload)
            logger.warning(f"Imgur upload forbidden: {message}")
            raise UpstreamError(status, message)
        if not 200 <= status < 300:
            logger.warning(f"Imgur upload failed: {status} {reason}")
            return payload

        if not isinstance(payload, dict):
            raise UpstreamError(status, f"Malformed imgur response: {payload!r}")

        upload_status = payload.get("status", status)
        if not payload.get("success"):
            return UploadResult(status=upload_status, success=False)

        data = payload.get("data") or {}
        logger.info(f"Uploaded image to imgur: {data.get('link')}")
        return UploadResult(
            id=data.get("id"),
            link=data.get("link"),
            deletehash=data.get("deletehash"),
            status=upload_status,
            success=True,
        )

    async def delete(self, deletehash: str) -> Union[dict, str]:
        """
        Delete an anonymously uploaded image.

        Returns the raw imgur payload; nothing checks that the image is gone.
        """
        if not self.client_id:
            raise MissingCredentialError(MISSING_CLIENT_ID_MESSAGE)

        status, reason, payload = await self._request("delete", f"{self.base_url}/{deletehash}")
        if not 200 <= status < 300:
            logger.warning(f"Imgur delete failed: {status} {reason}")
        return payload

    async def _request(self, method: str, url: str, data: Optional[dict] = None):
        headers = {
            "Authorization": f"Client-ID {self.client_id}",
            "User-Agent": self.user_agent,
        }

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                request = getattr(session, method)
                async with request(url, data=data, headers=headers) as response:
                    body = await response.text()
                    status, reason = response.status, response.reason or ""
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Imgur request failed: {e!r}")
            raise UpstreamError(0, str(e) or type(e).__name__) from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            payload = body
        return status, reason, payload
