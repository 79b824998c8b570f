"""
Post, Category, and PostCategory models for django-blog-cms.
"""
import uuid

from django.db import models, transaction
from django.utils import timezone

from ..conf import blog_settings


class Category(models.Model):
    """
    Category for organizing posts.

    Names are unique after trimming; the join rows live on PostCategory.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=blog_settings.CATEGORY_NAME_MAX_LENGTH, unique=True)
    image_url = models.URLField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.name = self.name.strip()
        super().save(*args, **kwargs)

    @property
    def post_count(self):
        """Return count of posts linked to this category."""
        annotated = getattr(self, "annotated_post_count", None)
        if annotated is not None:
            return annotated
        return self.post_links.count()

    @property
    def is_referenced(self):
        return self.post_links.exists()


class Post(models.Model):
    """
    Blog post.

    Posts start as drafts. ``version`` increases on every save so that
    editors can detect that someone else wrote in between.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=blog_settings.POST_TITLE_MAX_LENGTH)
    content = models.TextField()
    cover_image_url = models.URLField(max_length=500)
    published = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=1)

    categories = models.ManyToManyField(
        Category,
        through="PostCategory",
        related_name="posts",
        blank=True,
    )

    # Timestamps
    created_at = models.DateTimeField(db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["published", "-created_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # Set created_at if not set
        if not self.created_at:
            self.created_at = timezone.now()

        if not self._state.adding:
            self.version += 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = set(update_fields) | {"version"}

        super().save(*args, **kwargs)

    @property
    def is_draft(self):
        return not self.published

    @property
    def category_ids(self):
        """Return ids of linked categories as strings, in link order."""
        return [str(link.category_id) for link in self.category_links.all()]

    def can_view(self, preview=False):
        """
        Check if the post may be shown on the public surface.

        Drafts are only readable with the preview flag; reading never
        changes the post's state.
        """
        return self.published or preview

    def replace_categories(self, categories):
        """
        Replace every category link of this post with ``categories``.

        Deletion and recreation run in one transaction, so readers see
        either the old set or the new one.
        """
        with transaction.atomic():
            PostCategory.objects.filter(post=self).delete()
            PostCategory.objects.bulk_create(
                [PostCategory(post=self, category=category) for category in categories]
            )

    def publish(self):
        """Publish the post immediately."""
        self.published = True
        self.save(update_fields=["published", "updated_at"])

    def unpublish(self):
        """Turn the post back into a draft."""
        self.published = False
        self.save(update_fields=["published", "updated_at"])


class PostCategory(models.Model):
    """
    Junction table linking posts to categories.

    Rows have no lifecycle of their own: they disappear with either side.
    """

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name="category_links",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="post_links",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = "Post Category"
        verbose_name_plural = "Post Categories"
        constraints = [
            models.UniqueConstraint(
                fields=["post", "category"],
                name="blog_cms_unique_post_category",
            ),
        ]

    def __str__(self):
        return f"{self.post} - {self.category}"
