"""Result models for client operations."""

from dataclasses import dataclass, field
from typing import List

from ..graphql.types import GraphQLTweet
from .tweet import Tweet


@dataclass
class CursorPair:
    """Pagination tokens at the top and bottom of a fetched page."""

    previous: str = ""
    next: str = ""


@dataclass
class TimelinePage:
    """Tweets and cursors collected from one timeline."""

    tweets: List[GraphQLTweet] = field(default_factory=list)
    cursors: CursorPair = field(default_factory=CursorPair)


@dataclass
class UserTweetsResponse:
    """Result of ``UserTweets`` and ``UserTweetsAndReplies``."""

    raw_json: bytes
    tweets: List[Tweet]
    cursor_next: str = ""
    cursor_prev: str = ""


@dataclass
class TweetDetailResponse:
    """Result of ``TweetDetail``."""

    raw_json: bytes
    tweet: Tweet


@dataclass
class UserByScreenNameResponse:
    """Result of ``UserByScreenName``."""

    raw_json: bytes
    id: str
    name: str = ""
    username: str = ""
