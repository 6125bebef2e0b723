"""Twitter/X private GraphQL API client."""

import logging
from typing import Any, Dict, List, Optional

from ..config import AuthConfig, ClientConfig, configure_logging
from ..graphql.normalize import normalize
from ..graphql.timeline import walk
from ..graphql.types import (
    DEFAULT_REGISTRY,
    GraphQLUser,
    TimelineInstruction,
    TweetDetailResponseBody,
    TypeRegistry,
    UserResultResponse,
    decode_envelope,
)
from ..ingestion.backfill import ReferenceBackfill
from ..models.results import TweetDetailResponse, UserByScreenNameResponse, UserTweetsResponse
from ..models.tweet import Tweet
from .auth import GuestTokenAuthorizer
from .base import (
    Authorizer,
    MalformedInput,
    MissingData,
    Transport,
    UnknownType,
    check_response,
)
from . import queries
from .transport import RequestsTransport

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "*/*",
    "content-type": "application/json",
    "Pragma": "no-cache",
    "Cache-Control": "no-cache",
}


def _errors_message(errors: List[Any]) -> str:
    first = errors[0]
    if isinstance(first, dict) and first.get("message"):
        return str(first["message"])
    return str(first)


class GraphQLClient:
    """Client for the web app's GraphQL endpoints."""

    def __init__(
        self,
        authorizer: Authorizer,
        transport: Optional[Transport] = None,
        config: Optional[ClientConfig] = None,
        registry: TypeRegistry = DEFAULT_REGISTRY,
    ):
        """Initialize GraphQL client.

        Args:
            authorizer: Attaches session credentials to each request
            transport: HTTP transport (default: RequestsTransport)
            config: Client configuration (default: ClientConfig())
            registry: Type registry for response decoding
        """
        self.authorizer = authorizer
        self.config = config or ClientConfig()
        self.transport = transport or RequestsTransport(timeout=self.config.request_timeout)
        self.registry = registry
        self.backfiller = ReferenceBackfill(
            self.fetch_tweet, max_workers=self.config.backfill_workers
        )

    @classmethod
    def from_env(cls, transport: Optional[Transport] = None) -> "GraphQLClient":
        """Build a client from PWITTER_* environment variables.

        Validates both configs and installs the log format at the configured
        level before the client is created.

        Args:
            transport: HTTP transport (default: RequestsTransport)

        Raises:
            ValueError: If the configuration is invalid or tokens are missing
        """
        config = ClientConfig.from_env()
        config.validate()
        configure_logging(config.log_level)

        auth_config = AuthConfig.from_env()
        auth_config.validate()
        authorizer = GuestTokenAuthorizer.from_config(auth_config)
        logger.info("✅ Configuration loaded")
        return cls(authorizer, transport=transport, config=config)

    def _request(self, operation: str, variables: Dict[str, Any]) -> bytes:
        """Send one GraphQL GET request.

        Args:
            operation: Operation name
            variables: Operation variables

        Returns:
            Response body

        Raises:
            Throttled: On HTTP 429
            RequestFailed: On transport errors or other non-200 responses
        """
        url = queries.build_url(
            self.config.base_url, operation, variables, self.config.query_ids
        )
        headers = dict(DEFAULT_HEADERS)
        self.authorizer.set_auth_headers(headers)

        logger.debug(f"[{operation}] GET {url}")
        status_code, response_headers, body = self.transport.fetch(url, headers)
        check_response(operation, status_code, response_headers, body)
        return body

    def _user_result(self, operation: str, body: bytes) -> GraphQLUser:
        try:
            data = decode_envelope(UserResultResponse, body)
        except MalformedInput as e:
            raise MalformedInput(f"{operation}: {e}") from e

        wrapper = data.data.user if data.data is not None else None
        if wrapper is None or wrapper.result is None:
            if data.errors:
                raise MissingData(f"{operation}: {_errors_message(data.errors)}")
            raise MissingData(f"{operation}: no data.user.result in the response")

        try:
            resolved = self.registry.parse(wrapper.result)
        except MalformedInput as e:
            raise MalformedInput(f"{operation}: parsing data.user.result: {e}") from e
        except UnknownType as e:
            raise MissingData(f"{operation}: data.user.result: {e}") from e
        if not isinstance(resolved, GraphQLUser):
            raise MissingData(
                f"{operation}: data.user.result has unexpected type {wrapper.result.type_name!r}"
            )
        return resolved

    def _user_timeline(
        self, operation: str, user_id: str, cursor: str, filter_module_items: bool
    ) -> UserTweetsResponse:
        body = self._request(operation, queries.user_tweets_variables(user_id, cursor))
        user = self._user_result(operation, body)
        if user.timeline_v2 is None:
            raise MissingData(f"{operation}: no timeline found in the response")

        page = walk(
            user.timeline_v2.timeline.instructions,
            author_id=user_id,
            filter_module_items=filter_module_items,
            registry=self.registry,
        )
        tweets = []
        for source in page.tweets:
            try:
                tweets.append(normalize(source, self.registry))
            except MalformedInput as e:
                logger.info(f"[{operation}] Skipping tweet {source.rest_id}: {e}")

        tweets = self.backfiller.backfill_all(tweets)
        logger.info(f"✅ [{operation}] Fetched {len(tweets)} tweets for user {user_id}")
        return UserTweetsResponse(
            raw_json=body,
            tweets=tweets,
            cursor_next=page.cursors.next,
            cursor_prev=page.cursors.previous,
        )

    def user_tweets(self, user_id: str, cursor: str = "") -> UserTweetsResponse:
        """Get one page of tweets authored by a user.

        Args:
            user_id: Numeric user id
            cursor: Pagination cursor (empty string for first page)

        Returns:
            UserTweetsResponse with normalized tweets and cursors

        Raises:
            Throttled: On HTTP 429
            RequestFailed: On other HTTP or transport errors
            MalformedInput: If the response can't be decoded
            MissingData: If the response has no user timeline
        """
        return self._user_timeline(queries.USER_TWEETS, user_id, cursor, True)

    def user_tweets_and_replies(self, user_id: str, cursor: str = "") -> UserTweetsResponse:
        """Get one page of a user's tweets and replies.

        Conversation modules are filtered by author unless
        ``include_thread_participants`` is enabled in the config.
        """
        return self._user_timeline(
            queries.USER_TWEETS_AND_REPLIES,
            user_id,
            cursor,
            not self.config.include_thread_participants,
        )

    def _tweet_detail(self, tweet_id: str) -> TweetDetailResponse:
        operation = queries.TWEET_DETAIL
        body = self._request(operation, queries.tweet_detail_variables(tweet_id))
        try:
            data = decode_envelope(TweetDetailResponseBody, body)
        except MalformedInput as e:
            raise MalformedInput(f"{operation}: {e}") from e

        conversation = (
            data.data.threaded_conversation_with_injections_v2 if data.data is not None else None
        )
        if conversation is None:
            if data.errors:
                raise MissingData(f"{operation}: {_errors_message(data.errors)}")
            raise MissingData(f"{operation}: no conversation found in the response")

        instructions: List[TimelineInstruction] = conversation.instructions
        page = walk(instructions, registry=self.registry)
        for source in page.tweets:
            if source.rest_id != tweet_id and source.legacy.id_str != tweet_id:
                continue
            try:
                tweet = normalize(source, self.registry)
            except MalformedInput as e:
                raise MalformedInput(f"{operation}: tweet {tweet_id}: {e}") from e
            return TweetDetailResponse(raw_json=body, tweet=tweet)

        raise MissingData(f"{operation}: requested tweet {tweet_id} is missing from the response")

    def fetch_tweet(self, tweet_id: str) -> Tweet:
        """Fetch and normalize a single tweet without backfilling its references."""
        return self._tweet_detail(tweet_id).tweet

    def tweet_detail(self, tweet_id: str) -> TweetDetailResponse:
        """Get a single tweet with its referenced tweets included.

        Args:
            tweet_id: Tweet id

        Returns:
            TweetDetailResponse with the normalized tweet

        Raises:
            Throttled: On HTTP 429
            RequestFailed: On other HTTP or transport errors
            MalformedInput: If the response can't be decoded
            MissingData: If the tweet is not in the response
        """
        response = self._tweet_detail(tweet_id)
        response.tweet = self.backfiller.backfill(response.tweet)
        return response

    def user_by_screen_name(self, username: str) -> UserByScreenNameResponse:
        """Look up a user by screen name.

        Args:
            username: Screen name, with or without a leading @

        Returns:
            UserByScreenNameResponse with the user's id
        """
        operation = queries.USER_BY_SCREEN_NAME
        body = self._request(operation, queries.user_by_screen_name_variables(username))
        user = self._user_result(operation, body)
        if not user.rest_id:
            raise MissingData(f"{operation}: user {username!r} has no rest_id")
        legacy = user.legacy
        return UserByScreenNameResponse(
            raw_json=body,
            id=user.rest_id,
            name=legacy.name if legacy else "",
            username=legacy.screen_name if legacy else "",
        )
