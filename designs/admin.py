from django.contrib import admin

from .models import Design


@admin.register(Design)
class DesignAdmin(admin.ModelAdmin):
    list_display = ("id", "short_prompt", "creator", "user_key", "is_public", "has_no_background", "created_at")
    list_filter = ("is_public", "created_at")
    search_fields = ("prompt", "user_key", "creator__store_name")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("creator",)
    actions = ["hide_from_gallery", "show_in_gallery"]

    @admin.display(description="Prompt")
    def short_prompt(self, obj):
        return obj.prompt[:60]

    @admin.display(boolean=True, description="No background")
    def has_no_background(self, obj):
        return bool(obj.no_background_url)

    @admin.action(description="Hide selected designs from the public gallery")
    def hide_from_gallery(self, request, queryset):
        updated = queryset.update(is_public=False)
        self.message_user(request, f"Hidden {updated} design(s)")

    @admin.action(description="Show selected designs in the public gallery")
    def show_in_gallery(self, request, queryset):
        updated = queryset.update(is_public=True)
        self.message_user(request, f"Showing {updated} design(s)")
