"""Records shared by the search engines and the image host."""

import math
import re
from typing import Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# SauceNAO index ids we know how to label
SOURCE_LABELS = {
    5: "Pixiv",
    9: "Danbooru",
    25: "Gelbooru",
    28: "Anime-Pictures",
    34: "DevianArt",
    39: "ArtStation",
    41: "Twitter",
}
UNKNOWN_SOURCE = "Unknown"
NUMBER_PATTERN = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)")


def resolve_source(index_id: Optional[int]) -> str:
    """Human readable label for a SauceNAO index id."""
    return SOURCE_LABELS.get(index_id, UNKNOWN_SOURCE)


def _text(value) -> Optional[str]:
    """Upstream text field as a string; some indexes send lists, e.g. several creators."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item is not None)
    return str(value)


def _identifier(value) -> Optional[Union[int, str]]:
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, (list, tuple)):
        return _identifier(value[0]) if value else None
    text = str(value).strip()
    return int(text) if text.isdigit() else text


def absolute_url(url: Optional[str]) -> str:
    """Prefix scheme-relative links such as ``//host/img.jpg`` with ``http:``."""
    if not url:
        return ""
    if "http" in url:
        return url
    return "http:" + url


class SearchOptions(BaseModel):
    """
    SauceNAO search parameters.

    See https://saucenao.com/user.php?page=search-api for their meaning.
    ``min_similarity`` is applied client side after the results come back.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    output_type: int = 2
    dbmask: Optional[int] = None
    dbmaski: Optional[int] = None
    db: int = 999
    numres: int = Field(10, gt=0)
    hide: int = 3
    min_similarity: float = Field(0.0, ge=0)

    @classmethod
    def merged(
        cls, overrides: Union[None, "SearchOptions", Mapping[str, object]] = None
    ) -> "SearchOptions":
        """Defaults with every explicitly supplied field replaced."""
        if overrides is None:
            return cls()
        if isinstance(overrides, SearchOptions):
            overrides = overrides.model_dump(exclude_unset=True)
        return cls(**dict(overrides))

    def form_fields(self) -> Iterator[tuple[str, str]]:
        for name, value in self.model_dump().items():
            if value is not None:
                yield name, str(value)


class MatchResult(BaseModel):
    """A single candidate match, in upstream ranking order."""
    url: str = ""
    similarity: str = ""
    source: str = UNKNOWN_SOURCE


class SauceNaoMatch(MatchResult):
    index_id: Optional[int] = None
    index_name: Optional[str] = None
    thumbnail: Optional[str] = None
    ext_urls: list[str] = []
    title: Optional[str] = None
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    source_url: Optional[str] = None
    material: Optional[str] = None
    characters: Optional[str] = None
    # ids keep whatever shape the index uses, numeric or slug
    pixiv_id: Optional[Union[int, str]] = None
    member_id: Optional[Union[int, str]] = None
    danbooru_id: Optional[Union[int, str]] = None
    gelbooru_id: Optional[Union[int, str]] = None
    anime_pictures_id: Optional[Union[int, str]] = None
    da_id: Optional[Union[int, str]] = None
    as_project: Optional[Union[int, str]] = None

    @property
    def similarity_value(self) -> float:
        return parse_similarity(self.similarity)

    @classmethod
    def from_result(cls, entry: dict) -> "SauceNaoMatch":
        """Build a match from one ``{header, data}`` item of the ``results`` array."""
        header = entry.get("header") or {}
        data = entry.get("data") or {}
        ext_urls = data.get("ext_urls") or []
        if isinstance(ext_urls, str):
            ext_urls = [ext_urls]
        ext_urls = [str(url) for url in ext_urls]
        index_id = _identifier(header.get("index_id"))
        if not isinstance(index_id, int):
            index_id = None

        return cls(
            url=absolute_url(ext_urls[0] if ext_urls else _text(data.get("source"))),
            similarity=str(header.get("similarity", "")),
            source=resolve_source(index_id),
            index_id=index_id,
            index_name=_text(header.get("index_name")),
            thumbnail=_text(header.get("thumbnail")),
            ext_urls=ext_urls,
            title=_text(data.get("title")),
            author_name=_text(data.get("member_name") or data.get("author_name") or data.get("creator")),
            author_url=_text(data.get("author_url")),
            source_url=_text(data.get("source")),
            material=_text(data.get("material")),
            characters=_text(data.get("characters")),
            pixiv_id=_identifier(data.get("pixiv_id")),
            member_id=_identifier(data.get("member_id")),
            danbooru_id=_identifier(data.get("danbooru_id")),
            gelbooru_id=_identifier(data.get("gelbooru_id")),
            anime_pictures_id=_identifier(data.get("anime-pictures_id")),
            da_id=_identifier(data.get("da_id")),
            as_project=_identifier(data.get("as_project")),
        )


class IqdbMatch(MatchResult):
    """IQDB match; ``source`` is the name of the site IQDB found it on."""

    @property
    def service(self) -> str:
        return self.source


class UploadResult(BaseModel):
    """Outcome of an image host upload. Keep ``deletehash`` to remove the image later."""
    id: Optional[str] = None
    link: Optional[str] = None
    deletehash: Optional[str] = None
    status: int
    success: bool


def parse_similarity(value) -> float:
    """
    Leading number of a similarity value such as ``"95.00"`` or ``"92% similarity"``.

    Returns NaN when there is no number, so the value fails every threshold.
    """
    if isinstance(value, (int, float)):
        return float(value)
    match = NUMBER_PATTERN.match(str(value or ""))
    if not match:
        return math.nan
    return float(match.group(0))
