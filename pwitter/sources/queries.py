"""Request parameters for the GraphQL operations."""

import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

USER_TWEETS = "UserTweets"
USER_TWEETS_AND_REPLIES = "UserTweetsAndReplies"
TWEET_DETAIL = "TweetDetail"
USER_BY_SCREEN_NAME = "UserByScreenName"

DEFAULT_QUERY_IDS: Dict[str, str] = {
    USER_TWEETS: "HuTx74BxAnezK1gWvYY7zg",
    TWEET_DETAIL: "BbCrSoXIR7z93lLCVFlQ2Q",
    USER_TWEETS_AND_REPLIES: "zQxfEr5IFxQ2QZ-XMJlKew",
    USER_BY_SCREEN_NAME: "sLVLhk0bGj3MVFEKTdax1w",
}

# TODO: read the feature set from the web client's main.js instead of pinning it.
FEATURES: Dict[str, bool] = {
    "blue_business_profile_image_shape_enabled": True,
    "responsive_web_graphql_exclude_directive_enabled": True,
    "verified_phone_label_enabled": False,
    "responsive_web_graphql_timeline_navigation_enabled": True,
    "responsive_web_graphql_skip_user_profile_image_extensions_enabled": False,
    "tweetypie_unmention_optimization_enabled": True,
    "vibe_api_enabled": True,
    "responsive_web_edit_tweet_api_enabled": True,
    "graphql_is_translatable_rweb_tweet_is_translatable_enabled": True,
    "view_counts_everywhere_api_enabled": True,
    "longform_notetweets_consumption_enabled": True,
    "tweet_awards_web_tipping_enabled": False,
    "freedom_of_speech_not_reach_fetch_enabled": False,
    "standardized_nudges_misinfo": True,
    "tweet_with_visibility_results_prefer_gql_limited_actions_policy_enabled": False,
    "interactive_text_enabled": True,
    "responsive_web_text_conversations_enabled": False,
    "longform_notetweets_rich_text_read_enabled": True,
    "responsive_web_enhance_cards_enabled": False,
}

TIMELINE_PAGE_SIZE = 40


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def user_tweets_variables(user_id: str, cursor: str = "") -> Dict[str, Any]:
    variables: Dict[str, Any] = {
        "userId": user_id,
        "count": TIMELINE_PAGE_SIZE,
        "includePromotedContent": True,
        "withQuickPromoteEligibilityTweetFields": True,
        "withVoice": True,
        "withV2Timeline": True,
    }
    if cursor:
        variables["cursor"] = cursor
    return variables


def tweet_detail_variables(tweet_id: str) -> Dict[str, Any]:
    return {
        "focalTweetId": tweet_id,
        "with_rux_injections": False,
        "includePromotedContent": True,
        "withQuickPromoteEligibilityTweetFields": True,
        "withVoice": True,
        "withV2Timeline": True,
        "withCommunity": True,
        "withBirdwatchNotes": False,
    }


def user_by_screen_name_variables(screen_name: str) -> Dict[str, Any]:
    return {"screen_name": screen_name.lstrip("@"), "withSafetyModeUserFields": True}


def build_url(
    base_url: str,
    operation: str,
    variables: Mapping[str, Any],
    query_ids: Optional[Mapping[str, str]] = None,
) -> str:
    """Build the GET URL of a GraphQL operation.

    Args:
        base_url: Site root, e.g. "https://twitter.com"
        operation: Operation name, e.g. "TweetDetail"
        variables: Operation variables
        query_ids: Query id per operation (defaults to DEFAULT_QUERY_IDS)

    Returns:
        Full URL with ``variables`` and ``features`` query parameters

    Raises:
        ValueError: If no query id is known for the operation
    """
    ids = query_ids if query_ids is not None else DEFAULT_QUERY_IDS
    query_id = ids.get(operation)
    if not query_id:
        raise ValueError(f"No query id configured for operation {operation!r}")
    params = urlencode({"variables": _compact(dict(variables)), "features": _compact(FEATURES)})
    return f"{base_url.rstrip('/')}/i/api/graphql/{query_id}/{operation}?{params}"
