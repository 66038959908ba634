"""SauceNAO search via their JSON API.

API: https://saucenao.com/user.php?page=search-api
Requires an API key from a registered account.
"""

import json
import logging
from typing import Mapping, Optional, Union

import config
from errors import InvalidCredentialError, MissingCredentialError, UpstreamError
from image_input import ImageSource
from models import SauceNaoMatch, SearchOptions, parse_similarity

from .base import BaseEngine

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    "To use saucenao search you need to use your own api key. "
    "Go to https://saucenao.com, register and get an api key."
)


def normalize_results(results: list[dict], min_similarity: float = 0) -> list[SauceNaoMatch]:
    """
    Filter raw SauceNAO results by similarity and label their source.

    Upstream order is preserved. Entries whose similarity cannot be read
    are dropped.
    """
    matches = []
    for entry in results:
        header = entry.get("header") or {}
        if not parse_similarity(header.get("similarity")) >= min_similarity:
            logger.debug(f"Dropping result below {min_similarity}%: {header.get('similarity')}")
            continue
        matches.append(SauceNaoMatch.from_result(entry))
    return matches


class SauceNaoEngine(BaseEngine):
    """
    Engine for SauceNAO.

    Searches every index by default (``db=999``) and returns results with
    a readable source label resolved from their index id.
    """

    engine_name = "saucenao"
    endpoint = config.SAUCENAO_URL

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else config.SAUCENAO_API_KEY

    async def search(
        self,
        image,
        options: Union[None, SearchOptions, Mapping[str, object]] = None,
    ) -> list[SauceNaoMatch]:
        """
        Search SauceNAO for images similar to ``image``.

        Args:
            image: path, URL, bytes, binary stream or ImageSource
            options: overrides for the default SearchOptions

        Returns:
            matches at or above ``min_similarity``, most similar first

        Raises:
            MissingCredentialError: no api key configured
            InvalidCredentialError: SauceNAO rejected the key
            UpstreamError: any other non-success response
            InvalidInputKindError: unsupported image value
        """
        if not self.api_key:
            raise MissingCredentialError(MISSING_KEY_MESSAGE)

        opts = SearchOptions.merged(options)
        source = ImageSource.coerce(image)

        fields = list(opts.form_fields())
        fields.append(("api_key", self.api_key))

        status, reason, body = await self._post_image(source, fields)

        if status == 403:
            logger.warning("SauceNAO rejected the api key")
            raise InvalidCredentialError(f"{reason}, the api key is invalid.")
        if not 200 <= status < 300:
            logger.warning(f"SauceNAO error: {status} {reason}")
            raise UpstreamError(status, reason)

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise UpstreamError(status, f"Malformed SauceNAO response: {e}") from e

        matches = normalize_results(payload.get("results") or [], opts.min_similarity)
        logger.info(f"SauceNAO returned {len(matches)} matches")
        return matches
