"""Admin registration for cart models.

Provides admin interfaces for `Cart` and `CartItem`, with inline items on
the cart page for easier support.
"""

from django.contrib import admin, messages

from .models import Cart, CartItem
from .services import abandon_cart, clear_cart


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("design", "image_url", "quantity", "unit_price", "created_at", "updated_at")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("design",)


class HasItemsFilter(admin.SimpleListFilter):
    title = "contents"
    parameter_name = "has_items"

    def lookups(self, request, model_admin):
        return (
            ("yes", "With items"),
            ("no", "Empty"),
        )

    def queryset(self, request, queryset):
        value = self.value()
        if value == "yes":
            return queryset.filter(items__isnull=False).distinct()
        if value == "no":
            return queryset.filter(items__isnull=True)
        return queryset


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "session_id", "status", "updated_at", "created_at")
    list_filter = ("status", HasItemsFilter)
    search_fields = ("session_id",)
    ordering = ("-updated_at",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [CartItemInline]

    @admin.action(description="Clear cart (delete items, keep status active)")
    def action_clear_cart(self, request, queryset):
        cleared = 0
        for cart in queryset.filter(status=Cart.STATUS_ACTIVE):
            clear_cart(session_id=cart.session_id)
            cleared += 1
        messages.success(request, f"Cleared {cleared} cart(s).")

    @admin.action(description="Abandon cart (mark abandoned)")
    def action_abandon_cart(self, request, queryset):
        abandoned = 0
        for cart in queryset.filter(status=Cart.STATUS_ACTIVE):
            abandon_cart(cart=cart)
            abandoned += 1
        messages.success(request, f"Abandoned {abandoned} cart(s).")

    actions = [
        "action_clear_cart",
        "action_abandon_cart",
    ]


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "cart", "design", "quantity", "unit_price", "updated_at")
    search_fields = ("cart__session_id", "design__prompt")
    ordering = ("id",)
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("cart", "design")
