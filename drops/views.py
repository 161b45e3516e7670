"""DRF views for creator drop management and the public shop."""

from creators.permissions import IsCreator
from django.conf import settings
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from orders.payments import PaymentError
from orders.serializers import CheckoutResponseSerializer
from orders.services import compute_request_hash, create_order_from_pack, start_checkout, with_idempotency
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import ShopDropFilterSet
from .selectors import get_creator_drop, get_pack, get_published_drop, list_creator_drops, list_published_drops
from .serializers import (
    AddDropDesignSerializer,
    CalculatePriceSerializer,
    DropCreateSerializer,
    DropDesignSerializer,
    DropListSerializer,
    DropSerializer,
    DropUpdateSerializer,
    PackCheckoutSerializer,
    PackCreateSerializer,
    PackSerializer,
    ShopDropDetailSerializer,
    ShopDropSerializer,
)
from .services import (
    DropError,
    add_design,
    archive_drop,
    create_default_packs,
    create_drop,
    create_pack,
    publish_drop,
    quote_pack,
    remove_design,
    unpublish_drop,
    update_drop,
)

DetailError = inline_serializer(name="DropError", fields={"detail": rf_serializers.CharField()})
PublishError = inline_serializer(
    name="DropPublishError",
    fields={"detail": rf_serializers.CharField(), "details": rf_serializers.ListField(child=rf_serializers.CharField())},
)
DropEnvelope = inline_serializer(name="DropEnvelope", fields={"drop": DropSerializer()})


def _not_found():
    return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)


def _drop_error(exc: DropError):
    body = {"detail": str(exc)}
    if exc.details:
        body["details"] = exc.details
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


class CreatorDropMixin:
    """Load the caller's own drop; another creator's drop is reported as missing."""

    def get_drop(self, request, drop_id):
        return get_creator_drop(creator=request.user.creator, drop_id=drop_id)

    def drop_response(self, request, drop_id, code=status.HTTP_200_OK):
        drop = self.get_drop(request, drop_id)
        return Response({"drop": DropSerializer(drop).data}, status=code)


class DropListCreateView(APIView):
    permission_classes = [IsCreator]

    def get_throttles(self):
        self.throttle_scope = "drops_write" if self.request.method == "POST" else "drops"
        return super().get_throttles()

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="List my drops",
        responses={200: inline_serializer(name="DropList", fields={"drops": DropListSerializer(many=True)})},
    )
    def get(self, request):
        drops = list_creator_drops(creator=request.user.creator)
        return Response({"drops": DropListSerializer(drops, many=True).data})

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Create drop",
        description="Creates a draft drop. The slug is derived from the title and made unique per creator.",
        request=DropCreateSerializer,
        responses={201: DropEnvelope, 400: DetailError},
        examples=[OpenApiExample("Create", value={"title": "Spooky Season", "description": "Ghosts"}, request_only=True)],
    )
    def post(self, request):
        serializer = DropCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            drop = create_drop(creator=request.user.creator, **serializer.validated_data)
        except DropError as exc:
            return _drop_error(exc)
        return Response(
            {"drop": DropSerializer(get_creator_drop(creator=request.user.creator, drop_id=drop.id)).data},
            status=status.HTTP_201_CREATED,
        )


class DropDetailView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]

    def get_throttles(self):
        self.throttle_scope = "drops_write" if self.request.method == "PATCH" else "drops"
        return super().get_throttles()

    @extend_schema(tags=["Drop Endpoints"], summary="Get my drop", responses={200: DropEnvelope, 404: DetailError})
    def get(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        return Response({"drop": DropSerializer(drop).data})

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Edit drop",
        description="Title and description stay editable after publishing; the slug of a published drop is frozen.",
        request=DropUpdateSerializer,
        responses={200: DropEnvelope, 400: DetailError, 404: DetailError},
    )
    def patch(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        serializer = DropUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            update_drop(drop=drop, **serializer.validated_data)
        except DropError as exc:
            return _drop_error(exc)
        return self.drop_response(request, drop_id)


class DropDesignsView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Add design to drop",
        description="Adds one of the creator's generated designs. Marking it hero clears the previous hero.",
        request=AddDropDesignSerializer,
        responses={201: DropDesignSerializer, 400: DetailError, 404: DetailError},
        examples=[OpenApiExample("Add", value={"imageId": 42, "isHero": True}, request_only=True)],
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        serializer = AddDropDesignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            drop_design = add_design(
                drop=drop,
                design_id=serializer.validated_data["imageId"],
                is_hero=serializer.validated_data["isHero"],
            )
        except DropError as exc:
            return _drop_error(exc)
        return Response(DropDesignSerializer(drop_design).data, status=status.HTTP_201_CREATED)


class DropDesignDeleteView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Remove design from drop",
        responses={204: None, 400: DetailError, 404: DetailError},
    )
    def delete(self, request, drop_id: int, drop_design_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None or not drop.drop_designs.filter(id=drop_design_id).exists():
            return _not_found()
        try:
            remove_design(drop=drop, drop_design_id=drop_design_id)
        except DropError as exc:
            return _drop_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DropPacksView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Create pack",
        request=PackCreateSerializer,
        responses={201: PackSerializer, 400: DetailError, 404: DetailError},
        examples=[
            OpenApiExample(
                "Pack",
                value={"type": "BUILD_A_PACK", "name": "Pick 3", "designCount": 3, "price": "8.40", "isDefault": False},
                request_only=True,
            )
        ],
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        serializer = PackCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            pack = create_pack(
                drop=drop,
                type=data["type"],
                name=data["name"],
                description=data["description"],
                design_count=data["designCount"],
                price=data["price"],
                is_default=data["isDefault"],
            )
        except DropError as exc:
            return _drop_error(exc)
        return Response(PackSerializer(pack).data, status=status.HTTP_201_CREATED)


class DropDefaultPacksView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Create default packs",
        description="Creates the Pick 6 Pack and, with six or more designs, the Complete Collection.",
        request=None,
        responses={
            201: inline_serializer(name="DefaultPacks", fields={"packs": PackSerializer(many=True)}),
            400: DetailError,
            404: DetailError,
        },
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        try:
            packs = create_default_packs(drop=drop)
        except DropError as exc:
            return _drop_error(exc)
        return Response({"packs": PackSerializer(packs, many=True).data}, status=status.HTTP_201_CREATED)


class DropPublishView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Publish drop",
        request=None,
        responses={200: DropEnvelope, 400: PublishError, 404: DetailError},
        examples=[
            OpenApiExample(
                "Not Ready",
                value={"detail": "Drop cannot be published.", "details": ["Add at least one active pack."]},
                response_only=True,
            )
        ],
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        try:
            publish_drop(drop=drop)
        except DropError as exc:
            return _drop_error(exc)
        return self.drop_response(request, drop_id)


class DropUnpublishView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Unpublish drop",
        request=None,
        responses={200: DropEnvelope, 400: DetailError, 404: DetailError},
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        try:
            unpublish_drop(drop=drop)
        except DropError as exc:
            return _drop_error(exc)
        return self.drop_response(request, drop_id)


class DropArchiveView(CreatorDropMixin, APIView):
    permission_classes = [IsCreator]
    throttle_scope = "drops_write"

    @extend_schema(
        tags=["Drop Endpoints"],
        summary="Archive drop",
        request=None,
        responses={200: DropEnvelope, 404: DetailError},
    )
    def post(self, request, drop_id: int):
        drop = self.get_drop(request, drop_id)
        if drop is None:
            return _not_found()
        archive_drop(drop=drop)
        return self.drop_response(request, drop_id)


# Public shop


class ShopDropListView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "shop"

    @extend_schema(
        tags=["Shop Endpoints"],
        summary="List published drops",
        description="Published drops, newest first. Filter by `store` (store name) or search titles with `q`.",
        parameters=[
            OpenApiParameter("store", str, location=OpenApiParameter.QUERY, description="Store name"),
            OpenApiParameter("q", str, location=OpenApiParameter.QUERY, description="Search drop titles and descriptions"),
        ],
        responses={200: inline_serializer(name="ShopDrops", fields={"drops": ShopDropSerializer(many=True)})},
    )
    def get(self, request):
        drops = ShopDropFilterSet(request.query_params, queryset=list_published_drops()).qs
        return Response({"drops": ShopDropSerializer(drops, many=True).data})


class ShopDropDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "shop"

    @extend_schema(
        tags=["Shop Endpoints"],
        summary="Get published drop",
        responses={
            200: inline_serializer(name="ShopDropEnvelope", fields={"drop": ShopDropDetailSerializer()}),
            404: DetailError,
        },
    )
    def get(self, request, store_name: str, drop_slug: str):
        drop = get_published_drop(store_name=store_name, slug=drop_slug)
        if drop is None:
            return _not_found()
        return Response({"drop": ShopDropDetailSerializer(drop).data})


class CalculatePriceView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "shop"

    @extend_schema(
        tags=["Shop Endpoints"],
        summary="Calculate pack price",
        description="Validates the design selection for a pack and prices it with shipping for the country.",
        request=CalculatePriceSerializer,
        responses={
            200: inline_serializer(
                name="PackPrice",
                fields={
                    "pack": inline_serializer(
                        name="PackSummary",
                        fields={
                            "id": rf_serializers.IntegerField(),
                            "name": rf_serializers.CharField(),
                            "type": rf_serializers.CharField(),
                            "designCount": rf_serializers.IntegerField(),
                        },
                    ),
                    "pricing": inline_serializer(
                        name="PackPricing",
                        fields={
                            "subtotal": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                            "shipping": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                            "savings": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                            "savingsLabel": rf_serializers.CharField(allow_null=True),
                            "total": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                        },
                    ),
                },
            ),
            400: DetailError,
            404: DetailError,
        },
        examples=[
            OpenApiExample(
                "Price",
                value={
                    "pack": {"id": 3, "name": "Pick 6 Pack", "type": "BUILD_A_PACK", "designCount": 6},
                    "pricing": {
                        "subtotal": "16.80",
                        "shipping": "0.00",
                        "savings": "43.20",
                        "savingsLabel": "Save $43.20",
                        "total": "16.80",
                    },
                },
                response_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = CalculatePriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        pack = get_pack(data["packId"])
        if pack is None:
            return _not_found()
        try:
            _, quote = quote_pack(
                pack=pack,
                selected_design_ids=data["selectedDesignIds"],
                quantity=data["quantity"],
                country=data["country"],
            )
        except DropError as exc:
            return _drop_error(exc)
        pricing = quote.as_dict()
        for key in ("subtotal", "shipping", "savings", "total"):
            pricing[key] = f"{pricing[key]:.2f}"
        return Response(
            {
                "pack": {"id": pack.id, "name": pack.name, "type": pack.type, "designCount": pack.design_count},
                "pricing": pricing,
            }
        )


class PackCheckoutView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "checkout"

    @extend_schema(
        tags=["Shop Endpoints"],
        summary="Checkout a pack",
        description="Creates a pending pack order and returns the Stripe Checkout URL.",
        request=PackCheckoutSerializer,
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Makes the request idempotent within scope+path+method",
                type=str,
            ),
            OpenApiParameter(
                name="X-Session-Id",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Guest session identifier, scopes the idempotency key",
                type=str,
            ),
        ],
        responses={200: CheckoutResponseSerializer, 400: DetailError, 404: DetailError, 409: DetailError, 502: DetailError},
    )
    def post(self, request):
        serializer = PackCheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        pack = get_pack(data["packId"])
        if pack is None:
            return _not_found()
        shipping = dict(data["shippingDetails"])
        session_id = (request.headers.get("X-Session-Id") or "").strip()[:64]

        def _handler():
            try:
                designs, quote = quote_pack(
                    pack=pack,
                    selected_design_ids=data["selectedDesignIds"],
                    quantity=data["quantity"],
                    country=shipping["country"],
                )
            except DropError as exc:
                body = {"detail": str(exc)}
                if exc.details:
                    body["details"] = exc.details
                return body, 400
            order = create_order_from_pack(
                pack=pack,
                designs=designs,
                quantity=data["quantity"],
                quote=quote,
                shipping=shipping,
                session_id=session_id,
            )
            frontend = settings.FRONTEND_URL.rstrip("/")
            cancel_url = f"{frontend}/shop/{pack.drop.creator.store_name}/{pack.drop.slug}"
            try:
                return start_checkout(order, cancel_url=cancel_url), 200
            except PaymentError as exc:
                return {"detail": str(exc)}, 502

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=None,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_handler,
                scope=f"session:{session_id}" if session_id else "anon",
            )
            return Response(body, status=code)
        body, code = _handler()
        return Response(body, status=code)
