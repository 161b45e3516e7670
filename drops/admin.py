from django.contrib import admin, messages

from .models import Drop, DropDesign, Pack
from .services import DropError, archive_drop, publish_drop


class DropDesignInline(admin.TabularInline):
    model = DropDesign
    extra = 0
    fields = ("design", "display_order", "is_hero")
    raw_id_fields = ("design",)


class PackInline(admin.TabularInline):
    model = Pack
    extra = 0
    fields = ("type", "name", "design_count", "price", "is_default", "is_active")


@admin.register(Drop)
class DropAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "creator", "slug", "status", "published_at", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("title", "slug", "creator__store_name")
    readonly_fields = ("published_at", "created_at", "updated_at")
    raw_id_fields = ("creator",)
    inlines = [DropDesignInline, PackInline]
    actions = ["publish_selected", "archive_selected"]

    @admin.action(description="Publish selected drops")
    def publish_selected(self, request, queryset):
        for drop in queryset:
            try:
                publish_drop(drop=drop)
            except DropError as exc:
                self.message_user(request, f"{drop.title}: {'; '.join(exc.details)}", level=messages.WARNING)

    @admin.action(description="Archive selected drops")
    def archive_selected(self, request, queryset):
        for drop in queryset:
            archive_drop(drop=drop)
        self.message_user(request, f"Archived {queryset.count()} drop(s)")


@admin.register(Pack)
class PackAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "drop", "type", "design_count", "price", "is_default", "is_active")
    list_filter = ("type", "is_active", "is_default")
    search_fields = ("name", "drop__title")
    raw_id_fields = ("drop",)
