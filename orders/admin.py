from django.contrib import admin, messages

from .models import IdempotencyKey, Order, OrderItem
from .services import OrderError, cancel_order


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("design", "image_url", "quantity", "unit_price", "printify_product_id", "printify_variant_id")
    readonly_fields = ("printify_product_id", "printify_variant_id")
    raw_id_fields = ("design",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "number", "status", "source", "email", "total", "printify_order_id", "created_at")
    list_filter = ("status", "source", "country", "created_at")
    search_fields = ("number", "email", "public_id", "stripe_session_id", "printify_order_id")
    readonly_fields = ("public_id", "stripe_session_id", "stripe_payment_id", "paid_at", "shipped_at", "created_at", "updated_at")
    raw_id_fields = ("drop", "pack")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]
    actions = ["retry_fulfillment", "cancel_pending"]

    @admin.action(description="Retry Printify fulfillment")
    def retry_fulfillment(self, request, queryset):
        from fulfillment.services import FulfillmentError, submit_order

        done = failed = 0
        for order in queryset.filter(status__in=[Order.STATUS_PAID, Order.STATUS_FULFILLMENT_FAILED]):
            try:
                submit_order(order)
                done += 1
            except FulfillmentError:
                failed += 1
        if done:
            self.message_user(request, f"Submitted {done} order(s) to Printify", level=messages.SUCCESS)
        if failed:
            self.message_user(request, f"{failed} order(s) failed; see fulfillment errors", level=messages.WARNING)

    @admin.action(description="Cancel selected pending orders")
    def cancel_pending(self, request, queryset):
        count = 0
        for order in queryset:
            try:
                cancel_order(order)
                count += 1
            except OrderError as exc:
                self.message_user(request, f"{order.number}: {exc}", level=messages.WARNING)
        self.message_user(request, f"Cancelled {count} order(s)")


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "scope", "path", "method", "response_code", "created_at")
    list_filter = ("method", "response_code", "created_at")
    search_fields = ("key", "scope", "path")
    date_hierarchy = "created_at"
