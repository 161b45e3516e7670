from django.contrib import admin

from .models import Creator


@admin.register(Creator)
class CreatorAdmin(admin.ModelAdmin):
    list_display = ("id", "store_name", "name", "user", "is_onboarded", "created_at")
    list_filter = ("is_onboarded", "created_at")
    search_fields = ("store_name", "name", "user__email")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("user",)
