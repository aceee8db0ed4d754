"""
Data models for the astronews content store.
"""
from dataclasses import dataclass, field, fields
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union


def normalize_timestamp(value: Union[str, date, datetime]) -> datetime:
    """
    Bring a timestamp to the naive local time used throughout the store.

    Accepts ISO-8601 strings (a trailing 'Z' means UTC), plain dates
    (midnight) and aware datetimes, which are converted to local time.

    Args:
        value: Timestamp as parsed from a payload or seed file

    Returns:
        A naive datetime in local time
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        value = datetime.fromisoformat(text)
    elif not isinstance(value, datetime):
        if not isinstance(value, date):
            raise ValueError(f"Invalid timestamp: {value!r}")
        value = datetime.combine(value, time())

    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def _camel_case(name: str) -> str:
    """Convert a snake_case field name to its camelCase wire name."""
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _wire_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, list):
        return [_wire_value(item) for item in value]
    return value


class WireModel:
    """
    Mixin giving dataclasses the camelCase JSON shape the client expects.
    """
    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the record for the wire.

        Returns:
            Dict keyed by camelCase field names, timestamps as ISO-8601 strings
        """
        return {
            _camel_case(f.name): _wire_value(getattr(self, f.name))
            for f in fields(self)
        }


@dataclass
class User(WireModel):
    id: int
    username: str
    password: str


@dataclass
class Category(WireModel):
    id: int
    name: str
    slug: str
    color: str
    icon: str


@dataclass
class Actor(WireModel):
    """
    A person covered by articles.

    ``category`` is a free-text label ("music", "tech"), unrelated to the
    Category table that articles point at through ``category_id``.
    """
    id: int
    name: str
    slug: str
    category: str
    sun_sign: Optional[str] = None
    moon_sign: Optional[str] = None
    rising_sign: Optional[str] = None
    profile_image: Optional[str] = None


@dataclass
class AstroGlyph(WireModel):
    planet: str
    color: str
    symbol: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'planet': self.planet, 'color': self.color}
        if self.symbol is not None:
            data['symbol'] = self.symbol
        return data


@dataclass
class Article(WireModel):
    """
    A published article with its astrological annotations.
    """
    id: int
    title: str
    summary: str
    content: str
    category_id: int
    astro_analysis: str
    published_at: datetime = field(default_factory=datetime.now)
    astro_glyphs: List[AstroGlyph] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    actor_ids: List[int] = field(default_factory=list)
    like_count: int = 0
    share_count: int = 0
    bookmark_count: int = 0
    is_celebrity: bool = False


@dataclass
class ArticleWithDetails(Article):
    """
    Read-only projection of an Article joined with its Category and Actors.
    """
    category: Optional[Category] = None
    actors: List[Actor] = field(default_factory=list)


@dataclass
class UserBookmark(WireModel):
    id: int
    user_id: int
    article_id: int
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class UserFollow(WireModel):
    """
    A user following either an actor or a hashtag, never both.
    """
    id: int
    user_id: int
    actor_id: Optional[int] = None
    hashtag: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Following(WireModel):
    actors: List[Actor] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
