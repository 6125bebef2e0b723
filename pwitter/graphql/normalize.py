"""Conversion of decoded GraphQL tweets into the canonical tweet model."""

import logging
from datetime import timezone
from typing import Any, List, Optional

from dateutil import parser
from pydantic import ValidationError

from ..models.tweet import (
    EntityHashtag,
    EntityMention,
    EntityURL,
    Includes,
    Media,
    ReferencedTweet,
    Tweet,
    TwitterUser,
    VideoVariant,
)
from ..sources.base import MalformedInput
from .types import (
    DEFAULT_REGISTRY,
    GraphQLTweet,
    GraphQLUser,
    RawEntities,
    RawEntityMedia,
    TypeRegistry,
)

logger = logging.getLogger(__name__)

# Retweets are normalized recursively only this many levels deep.
MAX_RETWEET_DEPTH = 1

PHOTO = "photo"


def format_created_at(value: str) -> str:
    """Convert a legacy timestamp to ISO-8601 with millisecond precision.

    Args:
        value: Timestamp such as "Wed Jan 28 03:08:27 +0000 2015"

    Returns:
        Timestamp such as "2015-01-28T03:08:27.000Z", or the input unchanged
        if it can't be parsed
    """
    if not value:
        return ""
    try:
        parsed = parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug(f"Keeping unparseable created_at {value!r}")
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def parse_variants(raw: Any) -> List[VideoVariant]:
    """Parse a raw ``video_info.variants`` array, dropping anything unusable."""
    if not isinstance(raw, list):
        return []
    variants = []
    for item in raw:
        try:
            variants.append(VideoVariant.model_validate(item))
        except ValidationError:
            logger.debug(f"Dropping unparseable video variant: {item!r}")
    return variants


def normalize_user(user: GraphQLUser) -> Optional[TwitterUser]:
    if user.legacy is None or not user.rest_id:
        return None
    return TwitterUser(id=user.rest_id, name=user.legacy.name, username=user.legacy.screen_name)


def _media_record(e: RawEntityMedia) -> Media:
    media = Media(type=e.type, media_key=e.media_key, alt_text=e.ext_alt_text or None)
    if e.type == PHOTO:
        media.url = e.media_url_https or None
    else:
        media.preview_image_url = e.media_url_https or None
    if e.video_info is not None:
        media.variants = parse_variants(e.video_info.variants)
    return media


def _add_entities(tweet: Tweet, entities: RawEntities) -> None:
    for ue in entities.urls:
        tweet.entities.urls.append(
            EntityURL(
                start_offset=ue.indices[0],
                end_offset=ue.indices[1],
                url=ue.url,
                expanded_url=ue.expanded_url,
                display_url=ue.display_url,
            )
        )
    for he in entities.hashtags:
        tweet.entities.hashtags.append(
            EntityHashtag(start_offset=he.indices[0], end_offset=he.indices[1], tag=he.text)
        )
    for me in entities.user_mentions:
        tweet.entities.mentions.append(
            EntityMention(
                start_offset=me.indices[0], end_offset=me.indices[1], username=me.screen_name
            )
        )
        if me.id_str:
            tweet.includes.add_user(
                TwitterUser(id=me.id_str, name=me.name, username=me.screen_name)
            )


def _add_media(tweet: Tweet, extended: RawEntities) -> None:
    for e in extended.media:
        tweet.attachments.media_keys.append(e.media_key)
        tweet.entities.urls.append(
            EntityURL(
                start_offset=e.indices[0],
                end_offset=e.indices[1],
                url=e.url,
                expanded_url=e.expanded_url,
                display_url=e.display_url,
            )
        )
        tweet.includes.add_media(_media_record(e))


def _add_retweet(
    tweet: Tweet, source: GraphQLTweet, registry: TypeRegistry, depth: int
) -> None:
    wrapper = source.legacy.retweeted_status_result
    if wrapper is None or wrapper.result is None:
        return
    result = registry.try_parse(wrapper.result, GraphQLTweet)
    if not result.ok:
        logger.info(f"Ignoring retweeted status of {source.rest_id}: {result.error}")
        return

    retweeted = result.value
    tweet.referenced_tweets.append(ReferencedTweet(type="retweeted", id=retweeted.rest_id))
    if depth >= MAX_RETWEET_DEPTH:
        logger.debug(f"Not expanding retweet {retweeted.rest_id}: depth limit reached")
        return

    try:
        converted = normalize(retweeted, registry, depth + 1)
    except MalformedInput as e:
        logger.info(f"Ignoring retweeted status {retweeted.rest_id}: {e}")
        return
    tweet.includes.add_tweet(converted.without_includes())
    tweet.includes.merge(converted.includes)


def normalize(
    source: GraphQLTweet, registry: TypeRegistry = DEFAULT_REGISTRY, depth: int = 0
) -> Tweet:
    """Convert a decoded GraphQL tweet into a canonical tweet.

    Referenced tweets are recorded in the order reply, quote, retweet. Only
    the retweeted tweet is normalized recursively; its includes and the tweet
    itself are merged into this tweet's includes.

    Args:
        source: Decoded ``Tweet`` object
        registry: Type registry used for nested objects
        depth: Current retweet nesting level

    Returns:
        Canonical Tweet

    Raises:
        MalformedInput: If the tweet id is empty (a missing ``full_text``
            already fails when the tweet is resolved)
    """
    legacy = source.legacy
    if not source.rest_id:
        raise MalformedInput("tweet is missing rest_id")

    tweet = Tweet(
        id=source.rest_id,
        text=legacy.full_text,
        author_id=legacy.user_id_str,
        conversation_id=legacy.conversation_id_str,
        created_at=format_created_at(legacy.created_at),
        in_reply_to_user_id=legacy.in_reply_to_user_id_str or None,
    )

    if source.core is not None and source.core.user_results is not None:
        user_result = source.core.user_results.result
        if user_result is not None:
            result = registry.try_parse(user_result, GraphQLUser)
            if result.ok:
                author = normalize_user(result.value)
                if author is not None:
                    tweet.includes.add_user(author)
            else:
                logger.debug(f"Ignoring author of {source.rest_id}: {result.error}")

    if legacy.in_reply_to_status_id_str:
        tweet.referenced_tweets.append(
            ReferencedTweet(type="replied_to", id=legacy.in_reply_to_status_id_str)
        )
    if legacy.quoted_status_id_str:
        tweet.referenced_tweets.append(
            ReferencedTweet(type="quoted", id=legacy.quoted_status_id_str)
        )
    _add_retweet(tweet, source, registry, depth)

    if legacy.entities is not None:
        _add_entities(tweet, legacy.entities)
    if legacy.extended_entities is not None:
        _add_media(tweet, legacy.extended_entities)

    return tweet
