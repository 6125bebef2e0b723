"""Backfill of referenced tweets missing from a tweet's includes."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Union

from ..models.tweet import Tweet, TweetNoIncludes
from ..sources.base import PwitterError, ReferenceUnresolved

logger = logging.getLogger(__name__)

FetchTweet = Callable[[str], Tweet]


class ReferenceBackfill:
    """Fetches referenced tweets that a response didn't include."""

    def __init__(self, fetch_tweet: FetchTweet, max_workers: int = 1):
        """Initialize backfill.

        Args:
            fetch_tweet: Per-id fetch returning a normalized tweet
            max_workers: Number of fetches to run concurrently
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.fetch_tweet = fetch_tweet
        self.max_workers = max_workers
        self.last_unresolved: List[ReferenceUnresolved] = []

    @staticmethod
    def missing_ids(tweet: Tweet) -> List[str]:
        """Referenced tweet ids not present in ``includes.tweets``, in reference order."""
        included = set(tweet.includes.tweet_ids())
        return [tweet_id for tweet_id in tweet.referenced_ids() if tweet_id not in included]

    def _fetch_one(self, tweet_id: str) -> Union[TweetNoIncludes, ReferenceUnresolved]:
        try:
            # Only one level: the fetched tweet's own references are not followed.
            return self.fetch_tweet(tweet_id).without_includes()
        except (PwitterError, OSError) as e:
            return ReferenceUnresolved(tweet_id, e)

    def backfill(self, tweet: Tweet) -> Tweet:
        """Return a copy of ``tweet`` with missing referenced tweets included.

        A failed fetch is logged and leaves that id unresolved; it never
        fails the whole operation. Unresolved ids of the last call are kept
        in ``last_unresolved``.

        Args:
            tweet: Normalized tweet

        Returns:
            Updated copy of the tweet
        """
        result = tweet.model_copy(deep=True)
        self.last_unresolved = []

        missing = self.missing_ids(result)
        if not missing:
            return result

        logger.debug(f"Backfilling {len(missing)} referenced tweet(s) of {tweet.id}: {missing}")
        if self.max_workers == 1 or len(missing) == 1:
            fetched = [self._fetch_one(tweet_id) for tweet_id in missing]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(missing))) as pool:
                fetched = list(pool.map(self._fetch_one, missing))

        for item in fetched:
            if isinstance(item, ReferenceUnresolved):
                logger.warning(f"⚠️  {item}")
                self.last_unresolved.append(item)
                continue
            result.includes.add_tweet(item)

        return result

    def backfill_all(self, tweets: List[Tweet]) -> List[Tweet]:
        """Backfill each tweet of a batch.

        Args:
            tweets: Normalized tweets

        Returns:
            Updated copies, in the same order
        """
        unresolved: Dict[str, ReferenceUnresolved] = {}
        results = []
        for tweet in tweets:
            results.append(self.backfill(tweet))
            for item in self.last_unresolved:
                unresolved.setdefault(item.tweet_id, item)
        self.last_unresolved = list(unresolved.values())
        if unresolved:
            logger.info(f"{len(unresolved)} referenced tweet(s) could not be fetched")
        return results
