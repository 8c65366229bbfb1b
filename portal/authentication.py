"""
Bearer token authentication for the REST API.

This module defines a subclass of simplejwt's ``JWTAuthentication`` so
that the project's configuration has a stable import path.  Keeping it
separate from any view definitions avoids circular imports when the
REST framework imports authentication classes during initialisation.
"""
from __future__ import annotations

from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerJWTAuthentication(JWTAuthentication):
    """Authenticate ``Authorization: Bearer <jwt>`` headers.

    Deactivated accounts are rejected with the same 401 a bad token gets,
    so the frontend only has one failure mode to handle.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if not user.is_active:
            raise exceptions.AuthenticationFailed('User account is disabled', code='user_inactive')
        return user
