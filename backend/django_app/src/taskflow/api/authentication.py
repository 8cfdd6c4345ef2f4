from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework import exceptions
from rest_framework.authentication import TokenAuthentication
from rest_framework.authtoken.models import Token


def token_lifetime():
    return timedelta(hours=getattr(settings, 'TOKEN_TTL_HOURS', 24))


def issue_token(user):
    """Replace any previous token of the user with a fresh one."""
    Token.objects.filter(user=user).delete()
    return Token.objects.create(user=user)


class BearerTokenAuthentication(TokenAuthentication):
    """`Authorization: Bearer <key>` with tokens that expire after TOKEN_TTL_HOURS."""

    keyword = 'Bearer'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if token.created < timezone.now() - token_lifetime():
            token.delete()
            raise exceptions.AuthenticationFailed('token expired')
        return user, token
