from datetime import timedelta
import logging

import jwt
from django.conf import settings
from django.contrib.auth.tokens import PasswordResetTokenGenerator
from django.utils import timezone

from movies.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)

class EmailVerificationTokenGenerator(PasswordResetTokenGenerator):
    """Tokens stop validating once the address is confirmed."""

    key_salt = "accounts.tokens.EmailVerificationTokenGenerator"

    def _make_hash_value(self, user, timestamp):
        confirmed = getattr(getattr(user, 'profile', None), 'is_email_confirmed', False)
        return f"{user.pk}{user.email}{confirmed}{timestamp}"

email_verification_token = EmailVerificationTokenGenerator()

def create_access_token(user, role):
    """Issues a signed JWT for ``user``. Returns ``(token, expires_at)``."""
    issued_at = timezone.now()
    expires_at = issued_at + timedelta(minutes=settings.JWT_ACCESS_TOKEN_LIFETIME_MINUTES)

    payload = {
        'sub': str(user.pk),
        'email': user.email,
        'role': role,
        'iat': issued_at,
        'exp': expires_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at

def decode_access_token(token):

    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={'require': ['sub', 'exp']},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed('Access token has expired.')
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise AuthenticationFailed('Invalid access token.')
