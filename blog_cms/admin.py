"""
Django admin configuration for blog_cms.
"""
from django.contrib import admin, messages
from django.db.models import Count

from . import services
from .errors import BlogCMSError
from .models import Category, Post, PostCategory


class PostCategoryInline(admin.TabularInline):
    """Inline for managing the categories of a post."""

    model = PostCategory
    extra = 1
    fields = ["category"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "post_count", "image_url", "updated_at"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(annotated_post_count=Count("post_links"))

    @admin.display(description="Posts", ordering="annotated_post_count")
    def post_count(self, obj):
        return obj.post_count


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ["title_preview", "published", "version", "created_at", "updated_at"]
    list_filter = ["published", "categories", "created_at"]
    search_fields = ["title", "content"]
    date_hierarchy = "created_at"
    inlines = [PostCategoryInline]
    readonly_fields = ["version", "created_at", "updated_at"]

    fieldsets = (
        (None, {
            "fields": ("title", "content", "cover_image_url")
        }),
        ("Status", {
            "fields": ("published",)
        }),
        ("Metadata", {
            "fields": ("version", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_posts", "unpublish_posts", "duplicate_posts"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    @admin.action(description="Publish selected posts")
    def publish_posts(self, request, queryset):
        for post in queryset:
            post.publish()
        self.message_user(request, f"{queryset.count()} posts published.")

    @admin.action(description="Unpublish selected posts")
    def unpublish_posts(self, request, queryset):
        for post in queryset:
            post.unpublish()
        self.message_user(request, f"{queryset.count()} posts unpublished.")

    @admin.action(description="Duplicate selected posts")
    def duplicate_posts(self, request, queryset):
        count = 0
        for post in queryset:
            try:
                services.duplicate_post(post.pk)
            except BlogCMSError as e:
                self.message_user(request, f'Could not duplicate "{post}": {e}', messages.ERROR)
                continue
            count += 1
        self.message_user(request, f"{count} posts duplicated.")
