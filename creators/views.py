"""DRF views for creator profiles, dashboard data and public storefronts."""

from designs.serializers import DesignSerializer
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from drops.selectors import list_published_drops
from drops.serializers import ShopDropSerializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import IsCreator
from .selectors import creator_analytics, get_creator_by_store_name, list_creator_designs
from .serializers import CreatorAnalyticsSerializer, CreatorPublicSerializer, CreatorSerializer, ProfileUpdateSerializer
from .services import CreatorError, update_profile


class CreatorProfileView(APIView):
    """Complete onboarding or edit the signed-in creator's profile."""

    permission_classes = [IsCreator]
    throttle_scope = "creators"

    @extend_schema(
        tags=["Creator Endpoints"],
        summary="Update creator profile",
        description="Sets name, store name and bio. The store name must be unique and URL-safe.",
        request=ProfileUpdateSerializer,
        responses={
            200: inline_serializer(name="CreatorProfileResponse", fields={"creator": CreatorSerializer()}),
            400: inline_serializer(name="CreatorProfileError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[
            OpenApiExample(
                "Onboarding",
                value={"name": "Ada", "storeName": "ada-draws", "bio": "Weird little stickers"},
                request_only=True,
            )
        ],
    )
    def put(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            creator = update_profile(
                creator=request.user.creator,
                name=data["name"],
                store_name=data["storeName"],
                bio=data.get("bio", ""),
            )
        except CreatorError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"creator": CreatorSerializer(creator).data})


class CreatorAnalyticsView(APIView):
    permission_classes = [IsCreator]
    throttle_scope = "creators"

    @extend_schema(
        tags=["Creator Endpoints"],
        summary="Creator dashboard analytics",
        description="Drop, design and order counts plus gross sales and the creator payout share.",
        responses={200: CreatorAnalyticsSerializer},
        examples=[
            OpenApiExample(
                "Analytics",
                value={
                    "drops": {"total": 3, "published": 2, "draft": 1},
                    "designs": {"total": 18},
                    "orders": {"total": 4},
                    "earnings": {"totalGross": "67.20", "totalPayout": "53.76"},
                },
                response_only=True,
            )
        ],
    )
    def get(self, request):
        data = creator_analytics(creator=request.user.creator)
        return Response(CreatorAnalyticsSerializer(data).data)


class CreatorImagesView(APIView):
    permission_classes = [IsCreator]
    throttle_scope = "creators"

    @extend_schema(
        tags=["Creator Endpoints"],
        summary="List the creator's generated designs",
        parameters=[OpenApiParameter(name="limit", required=False, type=int, description="1-100, default 50")],
        responses={200: inline_serializer(name="CreatorImages", fields={"images": DesignSerializer(many=True)})},
    )
    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 50))
        except ValueError:
            limit = 50
        designs = list_creator_designs(creator=request.user.creator, limit=limit)
        return Response({"images": DesignSerializer(designs, many=True).data})


class PublicCreatorView(APIView):
    """Public storefront: creator header plus published drops."""

    permission_classes = [AllowAny]
    throttle_scope = "shop"

    @extend_schema(
        tags=["Shop Endpoints"],
        summary="Get creator storefront",
        responses={
            200: inline_serializer(
                name="PublicCreator",
                fields={"creator": CreatorPublicSerializer(), "drops": ShopDropSerializer(many=True)},
            ),
            404: inline_serializer(name="NotFoundError", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def get(self, request, store_name: str):
        creator = get_creator_by_store_name(store_name)
        if creator is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        drops = list_published_drops(creator=creator)
        return Response(
            {
                "creator": CreatorPublicSerializer(creator).data,
                "drops": ShopDropSerializer(drops, many=True).data,
            }
        )
