import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import authenticate

from apps.core.permissions import user_can_edit

logger = logging.getLogger(__name__)


def user_payload(user) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": getattr(user, "role", "member"),
    }


@api_view(["POST"])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login endpoint for JWT authentication
    returns: JWT refresh and access tokens
    """
    email = (request.data.get("email") or "").strip()
    password = request.data.get("password")

    if not email or not password:
        return Response({"success": False, "error": "Email and password are required", "field": None}, status=status.HTTP_400_BAD_REQUEST)

    user = authenticate(request, email=email, password=password)

    if not user:
        logger.warning(f"Failed login for {email}")
        return Response({"success": False, "error": "Invalid email or password", "field": None}, status=status.HTTP_401_UNAUTHORIZED)

    refresh = RefreshToken.for_user(user)
    logger.info(f"User {user.email} logged in")
    return Response(
        {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": user_payload(user),
        }
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout_view(request):
    refresh_token = request.data.get("refresh") or request.COOKIES.get("refresh_token")

    if refresh_token is None:
        return Response({"success": False, "error": "No refresh token provided.", "field": "refresh"}, status=status.HTTP_400_BAD_REQUEST)

    try:
        token = RefreshToken(refresh_token)
        token.blacklist()
    except TokenError as e:
        return Response({"success": False, "error": str(e), "field": "refresh"}, status=status.HTTP_400_BAD_REQUEST)

    response = Response(status=status.HTTP_204_NO_CONTENT)
    response.delete_cookie("refresh_token")

    return response


@api_view(["GET"])
@permission_classes([AllowAny])
def session_view(request):
    """
    Is-admin check for the current token; anonymous callers get a plain "no"
    """
    user = request.user
    if not user or not user.is_authenticated:
        return Response({"authenticated": False, "is_admin": False, "role": None})

    return Response(
        {
            "authenticated": True,
            "is_admin": user_can_edit(user),
            "role": user.role,
            "user": user_payload(user),
        }
    )
