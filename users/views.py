"""Users app API views.

Endpoints include:
- magic-link: sends a single-use sign-in link, creating the creator on first use.
- verify: exchanges a valid link for JWTs and the creator profile.
- me: returns the signed-in creator.
- refresh / logout: rotate or blacklist refresh tokens.
- check-store-name: reports whether a storefront name can be claimed.
"""

from creators.serializers import CreatorSerializer
from creators.services import is_store_name_available
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenRefreshView

from .logging import log_auth_event
from .serializers import MagicLinkRequestSerializer, MagicLinkVerifySerializer, SignOutSerializer
from .services import MagicLinkError, issue_session_tokens, request_magic_link, verify_magic_link


class MagicLinkRequestView(APIView):
    """Send a sign-in link; first-time emails become new creators."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "magic_link"

    @extend_schema(
        tags=["Auth Endpoints"],
        summary="Request magic link",
        request=MagicLinkRequestSerializer,
        responses={
            200: inline_serializer(
                name="MagicLinkSent",
                fields={"success": rf_serializers.BooleanField(), "isNewCreator": rf_serializers.BooleanField()},
            ),
        },
        examples=[OpenApiExample("Sent", value={"success": True, "isNewCreator": True}, response_only=True)],
    )
    def post(self, request):
        serializer = MagicLinkRequestSerializer(data=request.data)
        if not serializer.is_valid():
            log_auth_event("magic_link_request", request, status="invalid")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        user, is_new = request_magic_link(email=serializer.validated_data["email"])
        log_auth_event("magic_link_request", request, user=user, status="sent", extra={"new_creator": is_new})
        return Response({"success": True, "isNewCreator": is_new})


class MagicLinkVerifyView(APIView):
    """Exchange a magic link for a session."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "magic_link_verify"

    @extend_schema(
        tags=["Auth Endpoints"],
        summary="Verify magic link",
        description="Validates the email/token pair from the emailed link. Each link works once.",
        parameters=[
            OpenApiParameter(name="email", required=True, type=str),
            OpenApiParameter(name="token", required=True, type=str),
        ],
        responses={
            200: inline_serializer(
                name="MagicLinkSession",
                fields={
                    "creator": CreatorSerializer(),
                    "sessionToken": rf_serializers.CharField(),
                    "refreshToken": rf_serializers.CharField(),
                },
            ),
            400: OpenApiResponse(description="Invalid or expired link"),
        },
    )
    def get(self, request):
        serializer = MagicLinkVerifySerializer(data=request.query_params)
        if not serializer.is_valid():
            log_auth_event("magic_link_verify", request, status="invalid")
            return Response({"detail": "email and token are required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            user = verify_magic_link(**serializer.validated_data)
        except MagicLinkError as exc:
            log_auth_event("magic_link_verify", request, status="invalid_token")
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        tokens = issue_session_tokens(user)
        log_auth_event("magic_link_verify", request, user=user, status="success")
        return Response(
            {
                "creator": CreatorSerializer(user.creator).data,
                "sessionToken": tokens["access"],
                "refreshToken": tokens["refresh"],
            }
        )


@extend_schema(
    operation_id="auth_current_creator",
    summary="Get signed-in creator",
    description=(
        "Returns the creator bound to the bearer token.\n\n"
        "Errors: 401 if the token is missing or invalid; the client should clear its session."
    ),
    tags=["Auth Endpoints"],
    responses={
        200: inline_serializer(name="CurrentCreator", fields={"creator": CreatorSerializer()}),
        401: OpenApiResponse(description="Unauthorized"),
        404: OpenApiResponse(description="Account has no creator profile"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_creator(request):
    creator = getattr(request.user, "creator", None)
    if creator is None:
        return Response({"detail": "Creator profile not found."}, status=status.HTTP_404_NOT_FOUND)
    return Response({"creator": CreatorSerializer(creator).data})


current_creator.throttle_scope = "profile"


@extend_schema(
    tags=["Auth Endpoints"],
    summary="Check store name availability",
    parameters=[OpenApiParameter(name="storeName", required=True, type=str)],
    responses={
        200: inline_serializer(
            name="StoreNameAvailability",
            fields={"available": rf_serializers.BooleanField(), "error": rf_serializers.CharField(required=False)},
        )
    },
    examples=[
        OpenApiExample("Available", value={"available": True}, response_only=True),
        OpenApiExample(
            "Taken", value={"available": False, "error": "This store name is already taken."}, response_only=True
        ),
    ],
)
@api_view(["GET"])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def check_store_name(request):
    store_name = (request.query_params.get("storeName") or "").strip()
    creator = getattr(request.user, "creator", None) if request.user.is_authenticated else None
    available, error = is_store_name_available(store_name, exclude=creator)
    body = {"available": available}
    if error:
        body["error"] = error
    return Response(body)


check_store_name.throttle_scope = "store_name"


class SignOutView(APIView):
    """Blacklist the refresh token so the session cannot be extended."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["Auth Endpoints"], summary="Log out", request=SignOutSerializer)
    def post(self, request):
        serializer = SignOutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError:
            log_auth_event("logout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("logout", request, status="success")
        return Response({"success": True})


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["Auth Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_refresh", request, status=status_label)
        return resp
