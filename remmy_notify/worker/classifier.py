# remmy_notify/worker/classifier.py

from remmy_notify.schemas.push import Channel
from remmy_notify.schemas.reminders import PushToken

EXPO_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def looks_like_expo_token(token: str) -> bool:
    return token.startswith(EXPO_TOKEN_PREFIXES)


def classify_token(token: PushToken) -> Channel:
    """
    Android puede registrar un token FCM nativo o uno envuelto por Expo.
    Se va directo a FCM solo si es Android y token_type='fcm', o si no hay
    token_type y el string no tiene forma de token Expo.
    """
    if token.platform != "android":
        return Channel.EXPO
    if token.token_type == "fcm":
        return Channel.FCM
    if not token.token_type and not looks_like_expo_token(token.token):
        return Channel.FCM
    return Channel.EXPO
