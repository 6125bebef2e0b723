"""Structural comparison of canonical tweets from the private and public APIs."""

import difflib
import json
from typing import Any, Dict, List

from ..models.tweet import Tweet

EXPECTED_LABEL = "expected"
ACTUAL_LABEL = "actual"


def _variant_sort_key(variant: Dict[str, Any]):
    bit_rate = variant.get("bit_rate")
    # Variants without a bit rate sort last.
    return (bit_rate is None, bit_rate or 0, json.dumps(variant, sort_keys=True))


def _prune_empty(value: Any) -> Any:
    """Drop None, empty strings and empty collections at every level."""
    if isinstance(value, dict):
        pruned = {k: _prune_empty(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if v not in (None, "", [], {})}
    if isinstance(value, list):
        return [_prune_empty(v) for v in value]
    return value


def _canonical(tweet: Tweet) -> Dict[str, Any]:
    doc = tweet.model_dump(mode="json", by_alias=True)
    for media in doc.get("includes", {}).get("media", []):
        if media.get("variants"):
            media["variants"] = sorted(media["variants"], key=_variant_sort_key)
    return _prune_empty(doc)


def _render(doc: Dict[str, Any]) -> List[str]:
    return json.dumps(doc, indent=2, sort_keys=True, ensure_ascii=False).splitlines()


def diff(expected: Tweet, actual: Tweet) -> str:
    """Compare two canonical tweets, tolerating permitted divergences.

    ``actual`` may carry extra users and media in its includes, a different
    request config, and video variants in a different order. Empty and absent
    collections compare equal. Neither argument is modified.

    Args:
        expected: Tweet from the reference (public) source
        actual: Tweet produced from the private API

    Returns:
        Empty string if equivalent, otherwise a unified diff
    """
    actual = actual.model_copy(deep=True)
    actual.request_config = expected.request_config

    want_users = {u.id for u in expected.includes.users}
    actual.includes.users = [u for u in actual.includes.users if u.id in want_users]

    want_media = {m.media_key for m in expected.includes.media}
    actual.includes.media = [m for m in actual.includes.media if m.media_key in want_media]

    want = _canonical(expected)
    got = _canonical(actual)
    if want == got:
        return ""

    return "\n".join(
        difflib.unified_diff(
            _render(want), _render(got), fromfile=EXPECTED_LABEL, tofile=ACTUAL_LABEL, lineterm=""
        )
    )
