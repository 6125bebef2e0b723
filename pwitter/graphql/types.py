"""Concrete GraphQL response shapes and the type registry that resolves them."""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..sources.base import MalformedInput, PwitterError, UnknownType
from .tagged import TYPE_FIELD, TaggedObject, loads

logger = logging.getLogger(__name__)


class GraphQLShape(BaseModel):
    """Base for every decoded GraphQL object."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type_name: ClassVar[str] = ""

    @classmethod
    def model_validate_json(cls, json_data: Union[bytes, str], **kwargs: Any) -> Any:
        """Validate from JSON, keeping nested tagged objects' source bytes.

        Raises:
            MalformedInput: If the input is not valid JSON
            ValidationError: If it doesn't match the shape
        """
        return cls.model_validate(loads(json_data), **kwargs)


def _drop_malformed(cls: Any, value: Any, handler: Any) -> Any:
    # Optional nested structures degrade to None instead of failing the parent.
    try:
        return handler(value)
    except ValidationError as e:
        logger.info(f"Dropping malformed optional field: {e.error_count()} validation error(s)")
        return None


class ResultWrapper(GraphQLShape):
    """``{"result": {...}}`` wrapper around a tagged object."""

    result: Optional[TaggedObject] = None


# Timeline instructions


class TimelineInstructionEntry(GraphQLShape):
    entry_id: str = Field("", alias="entryId")
    sort_index: str = Field("", alias="sortIndex")
    content: Optional[TaggedObject] = None


class TimelineInstruction(GraphQLShape):
    type: str
    entries: List[TimelineInstructionEntry] = []
    entry: Optional[TimelineInstructionEntry] = None

    @field_validator("entries", mode="before")
    @classmethod
    def _null_entries(cls, value: Any) -> Any:
        return [] if value is None else value


class Timeline(GraphQLShape):
    instructions: List[TimelineInstruction] = []


class TimelineV2(GraphQLShape):
    timeline: Timeline


# Registered shapes


class TimelineCursor(GraphQLShape):
    type_name: ClassVar[str] = "TimelineTimelineCursor"

    entry_type: str = Field("", alias="entryType")
    value: str
    cursor_type: str = Field("", alias="cursorType")
    stop_on_empty_response: bool = Field(False, alias="stopOnEmptyResponse")


class TimelineItem(GraphQLShape):
    type_name: ClassVar[str] = "TimelineTimelineItem"

    entry_type: str = Field("", alias="entryType")
    item_content: Optional[TaggedObject] = Field(None, alias="itemContent")


class TimelineTweet(GraphQLShape):
    type_name: ClassVar[str] = "TimelineTweet"

    item_type: str = Field("", alias="itemType")
    tweet_results: Optional[ResultWrapper] = None
    display_type: str = Field("", alias="tweetDisplayType")


class ModuleItemContent(GraphQLShape):
    item_content: Optional[TaggedObject] = Field(None, alias="itemContent")


class ModuleItem(GraphQLShape):
    entry_id: str = Field("", alias="entryId")
    item: Optional[ModuleItemContent] = None


class TimelineModule(GraphQLShape):
    type_name: ClassVar[str] = "TimelineTimelineModule"

    entry_type: str = Field("", alias="entryType")
    display_type: str = Field("", alias="displayType")
    items: List[ModuleItem] = []

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return [] if value is None else value


class GraphQLUserLegacy(GraphQLShape):
    name: str = ""
    screen_name: str = ""


class GraphQLUser(GraphQLShape):
    type_name: ClassVar[str] = "User"

    id: str = ""
    rest_id: str = ""
    timeline_v2: Optional[TimelineV2] = None
    legacy: Optional[GraphQLUserLegacy] = None


# Legacy tweet entities


class RawEntityURL(GraphQLShape):
    url: str = ""
    display_url: str = ""
    expanded_url: str = ""
    indices: Tuple[int, int]


class RawEntityHashtag(GraphQLShape):
    text: str = ""
    indices: Tuple[int, int]


class RawEntityUserMention(GraphQLShape):
    id_str: str = ""
    name: str = ""
    screen_name: str = ""
    indices: Tuple[int, int]


class RawVideoInfo(GraphQLShape):
    # Parsed leniently by the normalizer.
    variants: Any = None


class RawEntityMedia(GraphQLShape):
    type: str = ""
    id_str: str = ""
    url: str = ""
    display_url: str = ""
    expanded_url: str = ""
    indices: Tuple[int, int]
    media_url_https: str = ""
    media_key: str = ""
    ext_alt_text: Optional[str] = None
    video_info: Optional[RawVideoInfo] = None


class RawEntities(GraphQLShape):
    media: List[RawEntityMedia] = []
    urls: List[RawEntityURL] = []
    user_mentions: List[RawEntityUserMention] = []
    hashtags: List[RawEntityHashtag] = []

    @field_validator("media", "urls", "user_mentions", "hashtags", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return [] if value is None else value


class GraphQLTweetLegacy(GraphQLShape):
    id_str: str = ""
    created_at: str = ""
    conversation_id_str: str = ""
    full_text: str
    user_id_str: str = ""
    favorite_count: int = 0
    reply_count: int = 0
    retweet_count: int = 0
    quote_count: int = 0
    in_reply_to_user_id_str: Optional[str] = None
    in_reply_to_status_id_str: Optional[str] = None
    quoted_status_id_str: Optional[str] = None
    entities: Optional[RawEntities] = None
    extended_entities: Optional[RawEntities] = None
    retweeted_status_result: Optional[ResultWrapper] = None

    drop_malformed_optionals = field_validator(
        "entities", "extended_entities", "retweeted_status_result", mode="wrap"
    )(_drop_malformed)


class GraphQLTweetCore(GraphQLShape):
    user_results: Optional[ResultWrapper] = None


class GraphQLTweet(GraphQLShape):
    type_name: ClassVar[str] = "Tweet"

    rest_id: str
    legacy: GraphQLTweetLegacy
    source: str = ""
    core: Optional[GraphQLTweetCore] = None

    drop_malformed_core = field_validator("core", mode="wrap")(_drop_malformed)


# Response envelopes


class UserResultData(GraphQLShape):
    user: Optional[ResultWrapper] = None


class UserResultResponse(GraphQLShape):
    """Body of ``UserTweets``, ``UserTweetsAndReplies`` and ``UserByScreenName``."""

    data: Optional[UserResultData] = None
    errors: List[Any] = []


class ThreadedConversation(GraphQLShape):
    instructions: List[TimelineInstruction] = []


class TweetDetailData(GraphQLShape):
    threaded_conversation_with_injections_v2: Optional[ThreadedConversation] = None


class TweetDetailResponseBody(GraphQLShape):
    """Body of ``TweetDetail``."""

    data: Optional[TweetDetailData] = None
    errors: List[Any] = []


E = TypeVar("E", bound=GraphQLShape)


def decode_envelope(model: Type[E], body: Union[bytes, str]) -> E:
    """Decode a whole response body into an envelope model.

    Raises:
        MalformedInput: If the body is not valid JSON of the expected shape
    """
    try:
        return model.model_validate_json(body)
    except (ValidationError, MalformedInput) as e:
        raise MalformedInput(f"unmarshaling JSON response: {e}") from e


# Registry


@dataclass(frozen=True)
class UnknownShape:
    """Resolution result for a type tag with no registered handler."""

    type_name: str


@dataclass(frozen=True)
class ParseResult:
    """Either a decoded shape or the reason it was skipped."""

    value: Optional[GraphQLShape] = None
    error: Optional[PwitterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def unknown(self) -> bool:
        return isinstance(self.error, UnknownType)


class TypeRegistry:
    """Maps a ``__typename`` to the shape that decodes it."""

    def __init__(self, shapes: Optional[Dict[str, Type[GraphQLShape]]] = None):
        self._shapes: Dict[str, Type[GraphQLShape]] = dict(shapes or {})

    def register(self, shape: Type[GraphQLShape], type_name: Optional[str] = None) -> None:
        name = type_name or shape.type_name
        if not name:
            raise ValueError(f"{shape.__name__} has no type name")
        self._shapes[name] = shape

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._shapes

    def resolve(self, obj: TaggedObject) -> Union[GraphQLShape, UnknownShape]:
        """Decode a tagged object into its registered shape.

        Args:
            obj: Tagged object to decode

        Returns:
            The decoded shape, or UnknownShape for unregistered tags

        Raises:
            MalformedInput: If the object has no type tag, or required fields
                are absent or mistyped
        """
        if not obj.type_name:
            raise MalformedInput(f"object doesn't have a {TYPE_FIELD} annotation")
        shape = self._shapes.get(obj.type_name)
        if shape is None:
            return UnknownShape(obj.type_name)
        try:
            return shape.model_validate_json(obj.raw)
        except (ValidationError, MalformedInput) as e:
            raise MalformedInput(f"unmarshaling {obj.type_name}: {e}") from e

    def parse(self, obj: TaggedObject) -> GraphQLShape:
        """Like resolve(), but raise UnknownType for unregistered tags."""
        resolved = self.resolve(obj)
        if isinstance(resolved, UnknownShape):
            raise UnknownType(resolved.type_name)
        return resolved

    def try_parse(
        self, obj: TaggedObject, expected: Optional[Type[GraphQLShape]] = None
    ) -> ParseResult:
        """Decode without raising for unknown, malformed or unexpected objects."""
        try:
            value = self.parse(obj)
        except (UnknownType, MalformedInput) as e:
            return ParseResult(error=e)
        if expected is not None and not isinstance(value, expected):
            return ParseResult(
                error=MalformedInput(
                    f"expected {expected.type_name}, got {obj.type_name}"
                )
            )
        return ParseResult(value=value)


DEFAULT_REGISTRY = TypeRegistry(
    {
        shape.type_name: shape
        for shape in (
            TimelineCursor,
            TimelineItem,
            TimelineTweet,
            GraphQLTweet,
            GraphQLUser,
            TimelineModule,
        )
    }
)
