"""Shared test fixtures and raw GraphQL payload builders."""

import json
from typing import Optional
from unittest.mock import MagicMock

import pytest

from pwitter.config import ClientConfig
from pwitter.sources.base import Authorizer

TWITTER_DEV_ID = "2244994945"


def make_user_result(
    rest_id: str,
    name: str = "",
    screen_name: str = "",
    instructions: Optional[list] = None,
) -> dict:
    """Build a ``User`` object as found in ``user_results.result``."""
    user = {
        "__typename": "User",
        "id": f"VXNlcjo{rest_id}",
        "rest_id": rest_id,
        "legacy": {"name": name, "screen_name": screen_name},
    }
    if instructions is not None:
        user["timeline_v2"] = {"timeline": {"instructions": instructions}}
    return user


def make_entities(urls=None, hashtags=None, mentions=None, media=None) -> dict:
    entities = {
        "hashtags": hashtags or [],
        "symbols": [],
        "urls": urls or [],
        "user_mentions": mentions or [],
    }
    if media is not None:
        entities["media"] = media
    return entities


def make_tweet_result(
    rest_id: str,
    text: str = "hello world",
    author_id: str = TWITTER_DEV_ID,
    author_name: str = "Twitter Dev",
    author_screen_name: str = "TwitterDev",
    created_at: str = "Wed Jan 28 03:08:27 +0000 2015",
    entities: Optional[dict] = None,
    extended_entities: Optional[dict] = None,
    **legacy_fields,
) -> dict:
    """Build a ``Tweet`` object as found in ``tweet_results.result``.

    Extra keyword arguments are set on ``legacy`` as-is.
    """
    legacy = {
        "id_str": rest_id,
        "created_at": created_at,
        "conversation_id_str": rest_id,
        "full_text": text,
        "user_id_str": author_id,
        "favorite_count": 0,
        "reply_count": 0,
        "retweet_count": 0,
        "quote_count": 0,
        "entities": entities if entities is not None else make_entities(),
    }
    if extended_entities is not None:
        legacy["extended_entities"] = extended_entities
    legacy.update(legacy_fields)
    return {
        "__typename": "Tweet",
        "rest_id": rest_id,
        "core": {
            "user_results": {
                "result": make_user_result(author_id, author_name, author_screen_name)
            }
        },
        "legacy": legacy,
    }


def make_timeline_tweet(tweet_result: dict) -> dict:
    return {
        "__typename": "TimelineTweet",
        "itemType": "TimelineTweet",
        "tweetDisplayType": "Tweet",
        "tweet_results": {"result": tweet_result},
    }


def make_item_entry(tweet_result: dict, entry_id: Optional[str] = None) -> dict:
    return {
        "entryId": entry_id or f"tweet-{tweet_result['rest_id']}",
        "sortIndex": "1",
        "content": {
            "__typename": "TimelineTimelineItem",
            "entryType": "TimelineTimelineItem",
            "itemContent": make_timeline_tweet(tweet_result),
        },
    }


def make_cursor_entry(cursor_type: str, value: str) -> dict:
    return {
        "entryId": f"cursor-{cursor_type.lower()}-1",
        "sortIndex": "0",
        "content": {
            "__typename": "TimelineTimelineCursor",
            "entryType": "TimelineTimelineCursor",
            "value": value,
            "cursorType": cursor_type,
        },
    }


def make_module_entry(entry_id: str, tweet_results: list) -> dict:
    return {
        "entryId": entry_id,
        "sortIndex": "2",
        "content": {
            "__typename": "TimelineTimelineModule",
            "entryType": "TimelineTimelineModule",
            "displayType": "VerticalConversation",
            "items": [
                {
                    "entryId": f"{entry_id}-tweet-{result['rest_id']}",
                    "item": {"itemContent": make_timeline_tweet(result)},
                }
                for result in tweet_results
            ],
        },
    }


def make_add_entries(entries: list) -> dict:
    return {"type": "TimelineAddEntries", "entries": entries}


def user_tweets_body(user_id: str, instructions: list) -> bytes:
    body = {"data": {"user": {"result": make_user_result(user_id, "Twitter Dev", "TwitterDev", instructions)}}}
    return json.dumps(body).encode("utf-8")


def tweet_detail_body(instructions: list) -> bytes:
    body = {"data": {"threaded_conversation_with_injections_v2": {"instructions": instructions}}}
    return json.dumps(body).encode("utf-8")


def mention(id_str: str, name: str, screen_name: str, start: int, end: int) -> dict:
    return {"id_str": id_str, "name": name, "screen_name": screen_name, "indices": [start, end]}


def hashtag(text: str, start: int, end: int) -> dict:
    return {"text": text, "indices": [start, end]}


LAUNCH_HACK_VIDEO = {
    "type": "video",
    "id_str": "571540163135873024",
    "media_key": "7_571540163135873024",
    "url": "http://t.co/hMRB11jObP",
    "display_url": "pic.twitter.com/hMRB11jObP",
    "expanded_url": "https://twitter.com/joncipriano/status/571540316437671937/video/1",
    "media_url_https": "https://pbs.twimg.com/ext_tw_video_thumb/571540163135873024/pu/img/aQFHH5pF_2BsvFql.jpg",
    "video_info": {
        "aspect_ratio": [16, 9],
        "variants": [
            {
                "bitrate": 2176000,
                "content_type": "video/mp4",
                "url": "https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/1280x720/Xe02cv2UOdcCkeup.mp4",
            },
            {
                "content_type": "application/x-mpegURL",
                "url": "https://video.twimg.com/ext_tw_video/571540163135873024/pu/pl/xR7iqWxLYqUurt2x.m3u8",
            },
            {
                "bitrate": 320000,
                "content_type": "video/mp4",
                "url": "https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/320x180/RZ4aja3Jq7O9C80R.mp4",
            },
            {
                "bitrate": 832000,
                "content_type": "video/mp4",
                "url": "https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/640x360/7iV9WnfpM_1UPEs4.mp4",
            },
        ],
    },
}


def launch_hack_retweet() -> dict:
    """Tweet 571542192939921408: a retweet of a video tweet."""
    retweeted = make_tweet_result(
        "571540316437671937",
        text="This is #LaunchHack. @TwitterDev @Launch @rchoi #hackathon http://t.co/hMRB11jObP",
        author_id="4534871",
        author_name="Jonathan Cipriano",
        author_screen_name="joncipriano",
        created_at="Sat Feb 28 05:20:04 +0000 2015",
        entities=make_entities(
            hashtags=[hashtag("LaunchHack", 8, 19), hashtag("hackathon", 48, 58)],
            mentions=[
                mention(TWITTER_DEV_ID, "Twitter Dev", "TwitterDev", 21, 32),
                mention("1474491", "LAUNCH", "LAUNCH", 33, 40),
                mention("6060192", "Richard Choi", "rchoi", 41, 47),
            ],
        ),
        extended_entities={"media": [dict(LAUNCH_HACK_VIDEO, indices=[59, 81])]},
    )
    return make_tweet_result(
        "571542192939921408",
        text="RT @joncipriano: This is #LaunchHack. @TwitterDev @Launch @rchoi #hackathon http://t.co/hMRB11jObP",
        created_at="Sat Feb 28 05:27:32 +0000 2015",
        entities=make_entities(
            hashtags=[hashtag("LaunchHack", 25, 36), hashtag("hackathon", 65, 75)],
            mentions=[
                mention("4534871", "Jonathan Cipriano", "joncipriano", 3, 15),
                mention(TWITTER_DEV_ID, "Twitter Dev", "TwitterDev", 38, 49),
                mention("1474491", "LAUNCH", "LAUNCH", 50, 57),
                mention("6060192", "Richard Choi", "rchoi", 58, 64),
            ],
        ),
        extended_entities={"media": [dict(LAUNCH_HACK_VIDEO, indices=[76, 98])]},
        retweeted_status_result={"result": retweeted},
    )


def twitter_drive_tweet() -> dict:
    """Tweet 560273169542443008: a photo tweet with mentions and a hashtag."""
    return make_tweet_result(
        "560273169542443008",
        text=(
            "MC @noonisms kicks off our meetup tonight in Las Vegas at @Zappos - "
            "#TwitterDrive to join the conversation http://t.co/NbKpDEXDB3"
        ),
        created_at="Wed Jan 28 03:08:27 +0000 2015",
        entities=make_entities(
            hashtags=[hashtag("TwitterDrive", 68, 81)],
            mentions=[
                mention("17520591", "Noon", "noonisms", 3, 12),
                mention("18581803", "Zappos.com", "Zappos", 58, 65),
            ],
        ),
        extended_entities={
            "media": [
                {
                    "type": "photo",
                    "id_str": "560273169164931072",
                    "media_key": "3_560273169164931072",
                    "url": "http://t.co/NbKpDEXDB3",
                    "display_url": "pic.twitter.com/NbKpDEXDB3",
                    "expanded_url": "https://twitter.com/TwitterDev/status/560273169542443008/photo/1",
                    "indices": [107, 129],
                    "media_url_https": "https://pbs.twimg.com/media/B8Z9eplCEAA5Ewp.png",
                }
            ]
        },
    )


# Same tweets as served by the public v2 API.
PUBLIC_LAUNCH_HACK = """{"id":"571542192939921408","text":"RT @joncipriano: This is #LaunchHack. @TwitterDev @Launch @rchoi #hackathon http://t.co/hMRB11jObP","conversation_id":"571542192939921408","author_id":"2244994945","referenced_tweets":[{"type":"retweeted","id":"571540316437671937"}],"entities":{"urls":[{"start":76,"end":98,"url":"http://t.co/hMRB11jObP","expanded_url":"https://twitter.com/joncipriano/status/571540316437671937/video/1","display_url":"pic.twitter.com/hMRB11jObP"}],"hashtags":[{"start":25,"end":36,"tag":"LaunchHack"},{"start":65,"end":75,"tag":"hackathon"}],"mentions":[{"start":3,"end":15,"username":"joncipriano"},{"start":38,"end":49,"username":"TwitterDev"},{"start":50,"end":57,"username":"LAUNCH"},{"start":58,"end":64,"username":"rchoi"}]},"attachments":{"media_keys":["7_571540163135873024"]},"created_at":"2015-02-28T05:27:32.000Z","includes":{"users":[{"id":"2244994945","name":"Twitter Dev","username":"TwitterDev"},{"id":"4534871","name":"Jonathan Cipriano","username":"joncipriano"}],"media":[{"type":"video","media_key":"7_571540163135873024","preview_image_url":"https://pbs.twimg.com/ext_tw_video_thumb/571540163135873024/pu/img/aQFHH5pF_2BsvFql.jpg","variants":[{"bit_rate":832000,"content_type":"video/mp4","url":"https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/640x360/7iV9WnfpM_1UPEs4.mp4"},{"bit_rate":320000,"content_type":"video/mp4","url":"https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/320x180/RZ4aja3Jq7O9C80R.mp4"},{"bit_rate":2176000,"content_type":"video/mp4","url":"https://video.twimg.com/ext_tw_video/571540163135873024/pu/vid/1280x720/Xe02cv2UOdcCkeup.mp4"},{"content_type":"application/x-mpegURL","url":"https://video.twimg.com/ext_tw_video/571540163135873024/pu/pl/xR7iqWxLYqUurt2x.m3u8"}]}],"tweets":[{"id":"571540316437671937","text":"This is #LaunchHack. @TwitterDev @Launch @rchoi #hackathon http://t.co/hMRB11jObP","conversation_id":"571540316437671937","author_id":"4534871","entities":{"urls":[{"start":59,"end":81,"url":"http://t.co/hMRB11jObP","expanded_url":"https://twitter.com/joncipriano/status/571540316437671937/video/1","display_url":"pic.twitter.com/hMRB11jObP"}],"hashtags":[{"start":8,"end":19,"tag":"LaunchHack"},{"start":48,"end":58,"tag":"hackathon"}],"mentions":[{"start":21,"end":32,"username":"TwitterDev"},{"start":33,"end":40,"username":"LAUNCH"},{"start":41,"end":47,"username":"rchoi"}]},"attachments":{"media_keys":["7_571540163135873024"]},"created_at":"2015-02-28T05:20:04.000Z"}]}}"""

PUBLIC_TWITTER_DRIVE = """{"id":"560273169542443008","text":"MC @noonisms kicks off our meetup tonight in Las Vegas at @Zappos - #TwitterDrive to join the conversation http://t.co/NbKpDEXDB3","conversation_id":"560273169542443008","author_id":"2244994945","entities":{"urls":[{"start":107,"end":129,"url":"http://t.co/NbKpDEXDB3","expanded_url":"https://twitter.com/TwitterDev/status/560273169542443008/photo/1","display_url":"pic.twitter.com/NbKpDEXDB3"}],"hashtags":[{"start":68,"end":81,"tag":"TwitterDrive"}],"mentions":[{"start":3,"end":12,"username":"noonisms"},{"start":58,"end":65,"username":"Zappos"}]},"attachments":{"media_keys":["3_560273169164931072"]},"created_at":"2015-01-28T03:08:27.000Z","includes":{"users":[{"id":"2244994945","name":"Twitter Dev","username":"TwitterDev"}],"media":[{"type":"photo","media_key":"3_560273169164931072","url":"https://pbs.twimg.com/media/B8Z9eplCEAA5Ewp.png"}]}}"""


@pytest.fixture
def mock_authorizer():
    """Authorizer that sets a single recognizable header."""
    authorizer = MagicMock(spec=Authorizer)
    authorizer.set_auth_headers.side_effect = lambda headers: headers.update(
        {"authorization": "Bearer test-token"}
    )
    return authorizer


@pytest.fixture
def mock_transport():
    """Transport whose fetch() is configured per test."""
    return MagicMock()


@pytest.fixture
def client_config():
    return ClientConfig(base_url="https://twitter.test")
