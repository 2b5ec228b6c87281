"""Tests for push channel classification."""

import pytest

from remmy_notify.schemas.push import Channel
from remmy_notify.schemas.reminders import PushToken
from remmy_notify.worker.classifier import classify_token, looks_like_expo_token


def _token(token, platform=None, token_type=None):
    return PushToken(token=token, user_id="u1", platform=platform, token_type=token_type)


@pytest.mark.parametrize("token,platform,token_type,expected", [
    ("ExponentPushToken[abc]", "ios", None, Channel.EXPO),
    ("abcd1234", "android", None, Channel.FCM),
    ("abcd1234", "android", "fcm", Channel.FCM),
    ("ExponentPushToken[abc]", "android", None, Channel.EXPO),
    ("ExpoPushToken[abc]", "android", None, Channel.EXPO),
    ("ExponentPushToken[abc]", "android", "fcm", Channel.FCM),
    ("abcd1234", "android", "expo", Channel.EXPO),
    ("abcd1234", "ios", "fcm", Channel.EXPO),
    ("abcd1234", None, None, Channel.EXPO),
])
def test_classify_token(token, platform, token_type, expected):
    assert classify_token(_token(token, platform, token_type)) == expected


def test_looks_like_expo_token():
    assert looks_like_expo_token("ExponentPushToken[xyz]")
    assert looks_like_expo_token("ExpoPushToken[xyz]")
    assert not looks_like_expo_token("fcm:APA91b")
