"""Timeline instruction walker."""

import logging
from typing import Iterable, Optional

from ..models.results import TimelinePage
from .tagged import TaggedObject
from .types import (
    DEFAULT_REGISTRY,
    GraphQLTweet,
    ParseResult,
    TimelineCursor,
    TimelineInstruction,
    TimelineItem,
    TimelineModule,
    TimelineTweet,
    TypeRegistry,
)

logger = logging.getLogger(__name__)

ADD_ENTRIES = "TimelineAddEntries"
CLEAR_CACHE = "TimelineClearCache"
PIN_ENTRY = "TimelinePinEntry"

CURSOR_TOP = "Top"
CURSOR_BOTTOM = "Bottom"


def _log_skip(what: str, result: ParseResult) -> None:
    if result.unknown:
        logger.debug(f"Skipping {what}: {result.error}")
    else:
        logger.info(f"Failed to parse {what}: {result.error}")


def tweet_from_item_content(
    item_content: Optional[TaggedObject],
    registry: TypeRegistry = DEFAULT_REGISTRY,
    what: str = "item content",
) -> Optional[GraphQLTweet]:
    """Resolve ``TimelineTweet`` item content down to the tweet it wraps.

    Args:
        item_content: ``itemContent`` of a timeline item or module item
        registry: Type registry used for resolution
        what: Description of the item, for log messages

    Returns:
        The tweet, or None if the content is not a usable timeline tweet
    """
    if item_content is None:
        return None
    if item_content.type_name != TimelineTweet.type_name:
        logger.debug(f"Skipping {what}: item content of type {item_content.type_name!r}")
        return None

    result = registry.try_parse(item_content, TimelineTweet)
    if not result.ok:
        _log_skip(what, result)
        return None

    timeline_tweet = result.value
    if timeline_tweet.tweet_results is None or timeline_tweet.tweet_results.result is None:
        logger.debug(f"Missing tweet data in {what}")
        return None

    result = registry.try_parse(timeline_tweet.tweet_results.result, GraphQLTweet)
    if not result.ok:
        _log_skip(f"tweet results of {what}", result)
        return None
    return result.value


def walk(
    instructions: Iterable[TimelineInstruction],
    author_id: Optional[str] = None,
    filter_module_items: bool = True,
    registry: TypeRegistry = DEFAULT_REGISTRY,
) -> TimelinePage:
    """Collect tweets and cursors from timeline instructions.

    Only ``TimelineAddEntries`` instructions are read. Every entry is resolved
    on its own: an entry that can't be decoded is logged and skipped without
    affecting the others.

    Args:
        instructions: Timeline instructions in server order
        author_id: If set, keep only tweets authored by this user
        filter_module_items: Apply ``author_id`` to conversation module items too
        registry: Type registry used for resolution

    Returns:
        TimelinePage with tweets in encounter order and the cursor pair
    """
    page = TimelinePage()

    def accept(tweet: Optional[GraphQLTweet], apply_filter: bool = True) -> None:
        if tweet is None:
            return
        if apply_filter and author_id is not None and tweet.legacy.user_id_str != author_id:
            logger.debug(
                f"Dropping tweet {tweet.rest_id} by {tweet.legacy.user_id_str!r} "
                f"(filtering by author {author_id!r})"
            )
            return
        page.tweets.append(tweet)

    for instruction in instructions:
        if instruction.type != ADD_ENTRIES:
            continue

        for entry in instruction.entries:
            if entry.content is None:
                continue
            result = registry.try_parse(entry.content)
            if not result.ok:
                _log_skip(f"content of entry {entry.entry_id!r}", result)
                continue

            content = result.value
            if isinstance(content, TimelineItem):
                accept(
                    tweet_from_item_content(
                        content.item_content, registry, f"entry {entry.entry_id!r}"
                    )
                )
            elif isinstance(content, TimelineCursor):
                if content.cursor_type == CURSOR_TOP:
                    page.cursors.previous = content.value
                elif content.cursor_type == CURSOR_BOTTOM:
                    page.cursors.next = content.value
            elif isinstance(content, TimelineModule):
                for item in content.items:
                    if item.item is None:
                        continue
                    accept(
                        tweet_from_item_content(
                            item.item.item_content, registry, f"module item {item.entry_id!r}"
                        ),
                        apply_filter=filter_module_items,
                    )

    return page
