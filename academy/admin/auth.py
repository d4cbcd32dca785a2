"""
Authentication and session service
Sign-up, sign-in and session resolution for all roles (admin, teacher, student)
"""
import logging

from django.contrib.auth.hashers import check_password, make_password
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes, throttle_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from academy.exceptions import Conflict, PermissionDenied, ValidationFailed
from .auth_backend import issue_token
from .models import UserProfile
from .serializers import (
    AvatarUploadSerializer, LoginSerializer, ProfileUpdateSerializer,
    RegisterSerializer, UserSerializer,
)
from .storage import AVATARS_BUCKET, upload_to_bucket
from .throttling import SignUpRateThrottle

logger = logging.getLogger(__name__)


def resolve_session(request):
    """
    Return {id, name, email, role} for the authenticated principal, or None.
    """
    user = getattr(request, 'user', None)
    if not isinstance(user, UserProfile):
        return None
    return {
        'id': str(user.id),
        'name': user.name,
        'email': user.email,
        'role': user.role,
    }


def sign_up(name, email, password, role, phone=None):
    """Create a profile and return (profile, token)"""
    email = email.strip().lower()

    if UserProfile.objects.filter(email__iexact=email).exists():
        raise Conflict('البريد الإلكتروني مستخدم بالفعل')

    try:
        with transaction.atomic():
            profile = UserProfile.objects.create(
                name=name.strip(),
                email=email,
                password_hash=make_password(password),
                role=role,
                phone=phone or None,
                status='active',
            )
    except IntegrityError:
        raise Conflict('البريد الإلكتروني مستخدم بالفعل')

    logger.info('Registered %s as %s', email, role)
    return profile, issue_token(profile)


def sign_in(email, password):
    """Validate credentials and return (profile, token)"""
    email = email.strip().lower()

    try:
        profile = UserProfile.objects.get(email__iexact=email)
    except UserProfile.DoesNotExist:
        raise ValidationFailed('البريد الإلكتروني أو كلمة المرور غير صحيحة')

    if not profile.password_hash or not check_password(password, profile.password_hash):
        raise ValidationFailed('البريد الإلكتروني أو كلمة المرور غير صحيحة')

    if profile.status != 'active':
        raise PermissionDenied('الحساب غير مفعل، يرجى التواصل مع الإدارة')

    profile.last_login = timezone.now()
    profile.save(update_fields=['last_login'])

    return profile, issue_token(profile)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([SignUpRateThrottle])
def register(request):
    """
    Register a new user

    Request body:
    {
        "name": "...",
        "email": "user@example.com",
        "password": "secret1",
        "role": "admin|teacher|student",
        "phone": "optional"
    }
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    profile, token = sign_up(
        name=data['name'],
        email=data['email'],
        password=data['password'],
        role=data['role'],
        phone=data.get('phone'),
    )
    return Response({'token': token, 'user': UserSerializer(profile).data}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password - returns token and user profile"""
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    profile, token = sign_in(serializer.validated_data['email'], serializer.validated_data['password'])
    return Response({'token': token, 'user': UserSerializer(profile).data})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def me(request):
    """Current session identity (GET) or profile edit (PATCH)"""
    if request.method == 'PATCH':
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

    return Response({
        'session': resolve_session(request),
        'user': UserSerializer(request.user).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def upload_avatar(request):
    """Upload a profile picture to the avatars bucket"""
    serializer = AvatarUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    url = upload_to_bucket(AVATARS_BUCKET, serializer.validated_data['avatar'], request=request)
    request.user.avatar_url = url
    request.user.save(update_fields=['avatar_url', 'updated_at'])

    return Response({'avatar_url': url}, status=status.HTTP_201_CREATED)
