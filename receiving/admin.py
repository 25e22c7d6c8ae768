from django.contrib import admin

from .models import StoredCollection


@admin.register(StoredCollection)
class StoredCollectionAdmin(admin.ModelAdmin):
    list_display = ("key", "record_count", "updated_at")
    search_fields = ("key",)
    readonly_fields = ("updated_at",)

    @admin.display(description="Records")
    def record_count(self, obj):
        return len(obj.payload) if isinstance(obj.payload, list) else 1
