"""Canonical tweet model.

Field names and JSON layout follow the public v2 tweet object so that values
produced from the private API can be compared against the public feed.
"""

from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TextEntity(CanonicalModel):
    """Span of ``text`` in UTF-16 code units."""

    start_offset: int = Field(..., alias="start")
    end_offset: int = Field(..., alias="end")


class EntityURL(TextEntity):
    url: str = ""
    expanded_url: str = ""
    display_url: str = ""


class EntityHashtag(TextEntity):
    tag: str = ""


class EntityMention(TextEntity):
    username: str = ""


class Entities(CanonicalModel):
    urls: List[EntityURL] = []
    hashtags: List[EntityHashtag] = []
    mentions: List[EntityMention] = []


class Attachments(CanonicalModel):
    media_keys: List[str] = []


class ReferencedTweet(CanonicalModel):
    type: Literal["replied_to", "quoted", "retweeted"]
    id: str


class TwitterUser(CanonicalModel):
    id: str
    name: str = ""
    username: str = ""


class VideoVariant(CanonicalModel):
    bit_rate: Optional[int] = Field(
        None, validation_alias=AliasChoices("bit_rate", "bitrate")
    )
    content_type: str = ""
    url: str = ""


class Media(CanonicalModel):
    type: str = ""
    media_key: str = ""
    url: Optional[str] = None
    preview_image_url: Optional[str] = None
    variants: List[VideoVariant] = []
    alt_text: Optional[str] = None


class RequestConfig(CanonicalModel):
    """Fields and expansions a public API request asked for."""

    expansions: List[str] = []
    tweet_fields: List[str] = []
    media_fields: List[str] = []


class TweetNoIncludes(CanonicalModel):
    """Tweet fields without the denormalized side-tables."""

    id: str
    text: str = ""
    conversation_id: str = ""
    author_id: str = ""
    created_at: str = ""
    in_reply_to_user_id: Optional[str] = None
    referenced_tweets: List[ReferencedTweet] = []
    entities: Entities = Field(default_factory=Entities)
    attachments: Attachments = Field(default_factory=Attachments)


class Includes(CanonicalModel):
    """Users, media and tweets referenced by a tweet, keyed by id."""

    users: List[TwitterUser] = []
    media: List[Media] = []
    tweets: List[TweetNoIncludes] = []

    def add_user(self, user: TwitterUser) -> bool:
        if any(u.id == user.id for u in self.users):
            return False
        self.users.append(user)
        return True

    def add_media(self, media: Media) -> bool:
        if any(m.media_key == media.media_key for m in self.media):
            return False
        self.media.append(media)
        return True

    def add_tweet(self, tweet: TweetNoIncludes) -> bool:
        if any(t.id == tweet.id for t in self.tweets):
            return False
        self.tweets.append(tweet)
        return True

    def tweet_ids(self) -> List[str]:
        return [t.id for t in self.tweets]

    def merge(self, other: "Includes") -> None:
        """Add every entry of ``other`` that isn't present yet, in order."""
        for user in other.users:
            self.add_user(user)
        for media in other.media:
            self.add_media(media)
        for tweet in other.tweets:
            self.add_tweet(tweet)


class Tweet(TweetNoIncludes):
    """Canonical tweet with its includes."""

    includes: Includes = Field(default_factory=Includes)
    # Echo of the request that produced the value; not part of the tweet itself.
    request_config: Optional[RequestConfig] = Field(None, exclude=True)

    def without_includes(self) -> TweetNoIncludes:
        return TweetNoIncludes.model_validate(
            self.model_dump(exclude={"includes", "request_config"})
        )

    def referenced_ids(self) -> List[str]:
        seen: List[str] = []
        for ref in self.referenced_tweets:
            if ref.id not in seen:
                seen.append(ref.id)
        return seen

    def to_json(self, **kwargs) -> str:
        """Serialize with v2 field names, omitting unset optional values."""
        return self.model_dump_json(by_alias=True, exclude_none=True, **kwargs)
