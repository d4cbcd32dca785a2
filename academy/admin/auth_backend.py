"""
JWT authentication backend for UserProfile principals

Tokens carry the auth metadata (user_id, email, name, role). A valid token
whose profile row is missing gets the row synthesized from those claims.
"""
import logging
import uuid
from datetime import timedelta

import jwt
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from .models import Role, UserProfile

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'


def issue_token(profile):
    """Sign a session token for the given profile"""
    now = timezone.now()
    ttl = settings.ACADEMY['TOKEN_TTL_SECONDS']
    payload = {
        'user_id': str(profile.id),
        'email': profile.email,
        'name': profile.name,
        'role': profile.role,
        'iat': int(now.timestamp()),
        'exp': int((now + timedelta(seconds=ttl)).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_token(token):
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed('انتهت صلاحية الجلسة، يرجى تسجيل الدخول مرة أخرى')
    except jwt.InvalidTokenError:
        raise AuthenticationFailed('رمز الجلسة غير صالح')


def profile_from_claims(claims):
    """
    Return the profile for the token claims, creating it from the claims when
    the row does not exist yet.
    """
    user_id = claims.get('user_id')
    email = (claims.get('email') or '').strip().lower()
    if not user_id or not email:
        raise AuthenticationFailed('Invalid token: missing user_id or email')

    try:
        user_id = uuid.UUID(str(user_id))
    except ValueError:
        raise AuthenticationFailed('Invalid token: malformed user_id')

    try:
        return UserProfile.objects.get(id=user_id)
    except UserProfile.DoesNotExist:
        pass

    role = claims.get('role')
    if role not in Role.values:
        role = Role.STUDENT

    try:
        with transaction.atomic():
            profile = UserProfile.objects.create(
                id=user_id,
                email=email,
                name=claims.get('name') or email.split('@')[0],
                role=role,
            )
        logger.info('Synthesized missing profile %s from session metadata', email)
        return profile
    except IntegrityError:
        # Another request inserted the row first (same id) or the email is
        # already bound to a different profile
        logger.info('Profile insert for %s lost a race, re-reading', email)
        profile = UserProfile.objects.filter(id=user_id).first()
        if profile is None:
            raise AuthenticationFailed('Session does not match any account')
        return profile


class JWTAuthentication(BaseAuthentication):
    """Bearer JWT authentication resolving to a UserProfile"""
    keyword = 'Bearer'

    def authenticate(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header.startswith(f'{self.keyword} '):
            return None

        token = auth_header[len(self.keyword) + 1:].strip()
        if not token:
            return None

        claims = decode_token(token)
        profile = profile_from_claims(claims)

        if profile.status != 'active':
            raise AuthenticationFailed('الحساب غير مفعل، يرجى التواصل مع الإدارة')

        return (profile, token)

    def authenticate_header(self, request):
        return self.keyword
