"""DRF views for sticker generation, background removal and design listings."""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .providers import ProviderError
from .selectors import get_design, list_public_designs, list_purchased_designs, list_user_designs, paginate_designs
from .serializers import DesignSerializer, GenerateDesignSerializer, RemoveBackgroundSerializer
from .services import DesignError, generate_design, remove_design_background

PAGINATION_FIELDS = {
    "currentPage": rf_serializers.IntegerField(),
    "pageSize": rf_serializers.IntegerField(),
    "totalItems": rf_serializers.IntegerField(),
    "totalPages": rf_serializers.IntegerField(),
}


def _request_creator(request):
    user = request.user
    if user and user.is_authenticated:
        return getattr(user, "creator", None)
    return None


class GenerateDesignView(APIView):
    """Render a new sticker from a prompt."""

    permission_classes = [AllowAny]
    throttle_scope = "designs_generate"

    @extend_schema(
        tags=["Design Endpoints"],
        summary="Generate sticker design",
        description=(
            "Generates a sticker image for the prompt. Unless `regenerate` is true, a previous result for "
            "the same userId, prompt and reference is returned instead of calling the image model again."
        ),
        request=GenerateDesignSerializer,
        responses={
            201: inline_serializer(
                name="DesignGenerated",
                fields={"id": rf_serializers.IntegerField(), "imageUrl": rf_serializers.URLField()},
            ),
            400: inline_serializer(name="DesignError", fields={"detail": rf_serializers.CharField()}),
            403: inline_serializer(name="ForbiddenError", fields={"detail": rf_serializers.CharField()}),
            502: inline_serializer(name="ProviderError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[
            OpenApiExample(
                "Generate",
                value={"prompt": "a raccoon riding a skateboard", "userId": "3f1c9a0e-5d7b", "regenerate": False},
                request_only=True,
            ),
            OpenApiExample("Generated", value={"id": 42, "imageUrl": "https://api.example.com/media/designs/a.png"}),
        ],
    )
    def post(self, request):
        serializer = GenerateDesignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        creator = None
        if data["creatorMode"]:
            creator = _request_creator(request)
            if creator is None:
                return Response({"detail": "Creator account required."}, status=status.HTTP_403_FORBIDDEN)

        try:
            design = generate_design(
                prompt=data["prompt"],
                user_key=data["userId"],
                regenerate=data["regenerate"],
                reference_url=data["referenceUrl"],
                creator=creator,
            )
        except DesignError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except ProviderError:
            return Response({"detail": "Image generation failed."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"id": design.id, "imageUrl": design.image_url}, status=status.HTTP_201_CREATED)


class RemoveBackgroundView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "designs_generate"

    @extend_schema(
        tags=["Design Endpoints"],
        summary="Remove design background",
        description="Stores a transparent PNG copy of the design. Repeated calls return the stored URL.",
        request=RemoveBackgroundSerializer,
        responses={
            200: inline_serializer(name="BackgroundRemoved", fields={"noBackgroundUrl": rf_serializers.URLField()}),
            404: inline_serializer(name="NotFoundError", fields={"detail": rf_serializers.CharField()}),
            502: inline_serializer(name="ProviderError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[OpenApiExample("Remove", value={"imageId": 42}, request_only=True)],
    )
    def post(self, request):
        serializer = RemoveBackgroundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        design = get_design(serializer.validated_data["imageId"])
        if design is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        try:
            design = remove_design_background(design=design)
        except ProviderError:
            return Response({"detail": "Background removal failed."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"noBackgroundUrl": design.no_background_url})


class RecentDesignsView(APIView):
    """Public gallery of recent designs."""

    permission_classes = [AllowAny]
    throttle_scope = "designs"

    @extend_schema(
        tags=["Design Endpoints"],
        summary="List recent designs",
        parameters=[
            OpenApiParameter(name="page", required=False, type=int, description="1-based page, default 1"),
            OpenApiParameter(name="limit", required=False, type=int, description="1-50, default 20"),
        ],
        responses={
            200: inline_serializer(
                name="RecentDesigns",
                fields={
                    "designs": DesignSerializer(many=True),
                    "pagination": inline_serializer(name="DesignPagination", fields=PAGINATION_FIELDS),
                },
            )
        },
    )
    def get(self, request):
        designs, pagination = paginate_designs(
            list_public_designs(),
            page=request.query_params.get("page", 1),
            limit=request.query_params.get("limit", 20),
        )
        return Response({"designs": DesignSerializer(designs, many=True).data, "pagination": pagination})


class UserDesignsView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "designs"

    @extend_schema(
        tags=["Design Endpoints"],
        summary="List an anonymous user's designs",
        parameters=[
            OpenApiParameter(name="page", required=False, type=int),
            OpenApiParameter(name="limit", required=False, type=int),
        ],
        responses={
            200: inline_serializer(
                name="UserDesigns",
                fields={
                    "designs": DesignSerializer(many=True),
                    "pagination": inline_serializer(name="UserDesignPagination", fields=PAGINATION_FIELDS),
                },
            )
        },
    )
    def get(self, request, user_key: str):
        designs, pagination = paginate_designs(
            list_user_designs(user_key=user_key),
            page=request.query_params.get("page", 1),
            limit=request.query_params.get("limit", 50),
        )
        return Response({"designs": DesignSerializer(designs, many=True).data, "pagination": pagination})


class PurchasedDesignsView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "designs"

    @extend_schema(
        tags=["Design Endpoints"],
        summary="List designs purchased with an email",
        parameters=[OpenApiParameter(name="email", required=True, type=str)],
        responses={
            200: inline_serializer(name="PurchasedDesigns", fields={"designs": DesignSerializer(many=True)}),
            400: inline_serializer(name="PurchasedDesignsError", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def get(self, request):
        email = (request.query_params.get("email") or "").strip()
        if not email:
            return Response({"detail": "Email is required."}, status=status.HTTP_400_BAD_REQUEST)
        designs = list_purchased_designs(email=email)
        return Response({"designs": DesignSerializer(designs, many=True).data})
