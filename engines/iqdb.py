"""IQDB search by scraping the HTML results page.

IQDB needs no API key. Results are laid out as one small table per match:

    row 1  heading ("Your image", "Best match", "Additional match")
    row 2  thumbnail, linked to the match
    row 3  site the match was found on
    row 4  dimensions and rating
    row 5  "NN% similarity"

The selectors below follow that layout and will break if IQDB changes it.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

import config
from errors import UpstreamError
from image_input import ImageSource
from models import IqdbMatch, absolute_url

from .base import BaseEngine

logger = logging.getLogger(__name__)

QUERY_ECHO_HEADING = "Your image"
RESULT_BLOCKS = "div.pages#pages div"
IMAGE_LINK = "td.image > a"


def _row(block: Tag, position: int) -> Optional[Tag]:
    # html.parser does not insert <tbody>, so count rows directly
    rows = block.select("table tr")
    if len(rows) < position:
        return None
    return rows[position - 1]


def _row_text(row: Optional[Tag]) -> str:
    if row is None:
        return ""
    return row.get_text(strip=True)


def _extract_service(block: Tag) -> str:
    row = _row(block, 3)
    if row is None:
        return ""
    cell = row.find("td")
    if cell is None:
        return _row_text(row)

    children = cell.find_all(recursive=False)
    if children:
        label = children[-1].get_text(strip=True)
        if label:
            return label
    return cell.get_text(strip=True)


def _extract_similarity(block: Tag) -> str:
    row = _row(block, 5)
    if row is None:
        return ""
    cell = row.find("td")
    return cell.get_text(strip=True) if cell else ""


def parse_results(html: str) -> list[IqdbMatch]:
    """
    Extract matches from an IQDB results page.

    The block echoing the query image is skipped. Missing pieces of a block
    come back as empty strings rather than failing the whole page.
    """
    soup = BeautifulSoup(html, "html.parser")
    matches = []

    for block in soup.select(RESULT_BLOCKS):
        if _row_text(_row(block, 1)) == QUERY_ECHO_HEADING:
            logger.debug("Skipping query image block")
            continue

        link = block.select_one(IMAGE_LINK)
        href = link.get("href", "") if link else ""

        matches.append(IqdbMatch(
            url=absolute_url(href),
            similarity=_extract_similarity(block),
            source=_extract_service(block),
        ))

    return matches


class IqdbEngine(BaseEngine):
    """Engine for iqdb.org, a multi-service anime image search."""

    engine_name = "iqdb"
    endpoint = config.IQDB_URL

    async def search(self, image) -> list[IqdbMatch]:
        """
        Search IQDB for images similar to ``image``.

        Raises:
            UpstreamError: transport failure or non-success response
            InvalidInputKindError: unsupported image value
        """
        source = ImageSource.coerce(image)

        status, reason, html = await self._post_image(source)
        if not 200 <= status < 300:
            logger.warning(f"IQDB error: {status} {reason}")
            raise UpstreamError(status, reason)

        matches = parse_results(html)
        logger.info(f"IQDB returned {len(matches)} matches")
        return matches
