"""
WebSocket authentication from a ``?token=<access JWT>`` query parameter.

Browsers cannot set an Authorization header on a WebSocket handshake, so
the frontend passes its access token in the query string instead.  When no
token is given the user resolved by the session middleware is kept.
"""
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken


@database_sync_to_async
def _user_for_token(raw: str):
    from django.contrib.auth.models import AnonymousUser
    try:
        token = AccessToken(raw)
    except TokenError:
        return AnonymousUser()
    User = get_user_model()
    user = User.objects.filter(**{api_settings.USER_ID_FIELD: token.get(api_settings.USER_ID_CLAIM)}).first()
    if user is None or not user.is_active:
        return AnonymousUser()
    return user


class QueryTokenAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        query = parse_qs((scope.get("query_string") or b"").decode())
        token = (query.get("token") or [None])[0]
        if token:
            scope = dict(scope, user=await _user_for_token(token))
        return await super().__call__(scope, receive, send)
