"""
Views for users app.
"""

import logging

from django.conf import settings
from django.contrib.auth.models import User
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import exceptions, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_api_settings
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from apps.common.audit import SecurityAuditLogger

from .permissions import NotSuspended
from .serializers import (
    LogoutSerializer,
    PasswordUpdateSerializer,
    RefreshTokenSerializer,
    TokenSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)
from .signals import user_created
from .throttles import LoginThrottle, PasswordChangeThrottle, RegisterThrottle
from .tokens import issue_tokens, parse_scopes, token_response, token_scopes

logger = logging.getLogger(__name__)


@extend_schema(tags=['Authentication'])
@extend_schema_view(
    post=extend_schema(
        summary="Register a new user",
        description="Creates a user with name, email, password and country.",
        request=UserRegistrationSerializer,
        responses={
            200: UserSerializer,
            422: {"description": "Validation error (e.g. email already taken)"}
        }
    )
)
class RegisterView(APIView):
    """
    API endpoint for user registration.
    POST /api/v1/auth/register/
    """
    permission_classes = [AllowAny]
    throttle_classes = [RegisterThrottle]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        user_created.send(sender=self.__class__, user=user, request=request)

        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


@extend_schema(tags=['Authentication'])
@extend_schema_view(
    post=extend_schema(
        summary="Log in",
        description="""
        Password grant. Returns a Bearer access token and a refresh token.

        `scope` is an optional space separated list of token scopes
        (view-teams, manage-teams, manage-subscriptions, view-invoices).
        Without it the token carries every scope.
        """,
        request=UserLoginSerializer,
        responses={
            200: TokenSerializer,
            401: {"description": "Invalid credentials"},
            422: {"description": "Unknown scope or missing fields"}
        }
    )
)
class LoginView(APIView):
    """
    API endpoint for user login.
    POST /api/v1/auth/login/
    """
    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = UserLoginSerializer(data=request.data)

        try:
            serializer.is_valid(raise_exception=True)
        except exceptions.AuthenticationFailed:
            SecurityAuditLogger.log_login_failure(request.data.get('email', 'unknown'), request)
            raise

        user = serializer.validated_data['user']
        scopes = serializer.validated_data['scope']

        SecurityAuditLogger.log_login_success(user, request, method='password')

        return Response(issue_tokens(user, scopes), status=status.HTTP_200_OK)


@extend_schema(tags=['Authentication'])
@extend_schema_view(
    post=extend_schema(
        summary="Refresh tokens",
        description="Exchanges a refresh token for a new token pair. Scopes are kept.",
        request=RefreshTokenSerializer,
        responses={
            200: TokenSerializer,
            400: {"description": "Invalid or revoked refresh token"}
        }
    )
)
class TokenRefreshView(APIView):
    """
    API endpoint for refreshing tokens.
    POST /api/v1/auth/refresh/
    """
    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            refresh = RefreshToken(serializer.validated_data['refresh_token'])
            user = User.objects.get(pk=refresh[jwt_api_settings.USER_ID_CLAIM], is_active=True)
        except (TokenError, KeyError, User.DoesNotExist) as e:
            logger.info("Refresh rejected: %s", e)
            return Response(
                {
                    "error": {
                        "code": "INVALID_GRANT",
                        "message": "The refresh token is invalid.",
                        "details": {}
                    }
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        jwt_settings = getattr(settings, 'SIMPLE_JWT', {})
        if not jwt_settings.get('ROTATE_REFRESH_TOKENS', False):
            return Response(token_response(refresh), status=status.HTTP_200_OK)

        if jwt_settings.get('BLACKLIST_AFTER_ROTATION', False):
            refresh.blacklist()

        # New pair through for_user() so the rotated token is tracked for logout
        return Response(
            issue_tokens(user, token_scopes(refresh) or parse_scopes('')),
            status=status.HTTP_200_OK
        )


@extend_schema(tags=['Authentication'])
@extend_schema_view(
    post=extend_schema(
        summary="Log out",
        description=(
            "Revokes the given refresh token. "
            "Without one, every outstanding refresh token of the user is revoked."
        ),
        request=LogoutSerializer,
        responses={200: {"description": "Logged out"}}
    )
)
class LogoutView(APIView):
    """
    API endpoint for logging out.
    POST /api/v1/auth/logout/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        raw = serializer.validated_data.get('refresh_token')

        revoked = 0
        if raw:
            try:
                RefreshToken(raw).blacklist()
                revoked = 1
            except TokenError as e:
                # Already revoked or expired: the client is logged out either way
                logger.info("Logout with unusable refresh token: user_id=%s %s", request.user.id, e)
        else:
            for token in OutstandingToken.objects.filter(user=request.user):
                _, created = BlacklistedToken.objects.get_or_create(token=token)
                revoked += int(created)

        SecurityAuditLogger.log_logout(request.user, request, revoked=revoked)

        return Response({"message": "Logged out."}, status=status.HTTP_200_OK)


@extend_schema(tags=['Account'])
class AccountView(APIView):
    """
    API endpoint for the current user.
    GET /api/v1/account/
    """
    permission_classes = [IsAuthenticated, NotSuspended]

    @extend_schema(responses={200: UserSerializer})
    def get(self, request):
        return Response(UserSerializer(request.user).data)


@extend_schema(tags=['Account'])
@extend_schema_view(
    post=extend_schema(
        summary="Update password",
        request=PasswordUpdateSerializer,
        responses={
            200: UserSerializer,
            422: {"description": "Wrong current password or invalid new password"}
        }
    ),
    put=extend_schema(
        summary="Update password",
        request=PasswordUpdateSerializer,
        responses={200: UserSerializer}
    )
)
class PasswordUpdateView(APIView):
    """
    API endpoint for changing the password.
    POST|PUT /api/v1/account/password/
    """
    permission_classes = [IsAuthenticated, NotSuspended]
    throttle_classes = [PasswordChangeThrottle]

    def post(self, request):
        serializer = PasswordUpdateSerializer(
            data=request.data,
            context={'request': request}
        )

        try:
            serializer.is_valid(raise_exception=True)
        except exceptions.ValidationError:
            SecurityAuditLogger.log_password_change(request.user, request, success=False)
            raise

        user = request.user
        user.set_password(serializer.validated_data['password'])
        user.save(update_fields=['password'])

        SecurityAuditLogger.log_password_change(user, request, success=True)

        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)

    def put(self, request):
        return self.post(request)
