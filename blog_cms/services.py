"""
Category store, post store and public read service.

Views and the Django admin call these functions; they raise the errors
from ``blog_cms.errors`` and never return partial results.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count

from .conf import PROTECT, blog_settings
from .errors import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from .forms import CategoryForm, PostForm, duplicate_title, form_errors
from .models import Category, Post
from .serializers import wire_errors

logger = logging.getLogger(__name__)


def _validation_error(form):
    return ValidationError(errors=wire_errors(form_errors(form)))


# =============================================================================
# Categories
# =============================================================================

def _category_queryset(with_counts=True):
    qs = Category.objects.all()
    if with_counts:
        qs = qs.annotate(annotated_post_count=Count("post_links"))
    return qs.order_by("name")


def list_categories(with_counts=True):
    """Return all categories ordered by name, annotated with post counts."""
    return list(_category_queryset(with_counts))


def get_category(category_id, with_counts=True):
    try:
        return _category_queryset(with_counts).get(pk=category_id)
    except Category.DoesNotExist:
        raise NotFoundError("Category not found.")


def _ensure_unique_name(name, exclude_pk=None):
    qs = Category.objects.filter(name=name)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        logger.warning("Rejected duplicate category name %r", name)
        raise ConflictError(f'A category named "{name}" already exists.')


def create_category(name, image_url=None, description=None):
    """
    Create a category.

    Raises:
        ValidationError: name empty after trimming, or bad image URL
        ConflictError: a category with the same trimmed name exists
    """
    form = CategoryForm({
        "name": name,
        "image_url": image_url or "",
        "description": description or "",
    })
    if not form.is_valid():
        raise _validation_error(form)

    data = form.cleaned_data
    _ensure_unique_name(data["name"])
    try:
        with transaction.atomic():
            category = Category.objects.create(
                name=data["name"],
                image_url=data["image_url"],
                description=data["description"],
            )
    except IntegrityError:
        # Lost a race with a concurrent create of the same name.
        raise ConflictError(f'A category named "{data["name"]}" already exists.')

    logger.info("Created category %s (%s)", category.pk, category.name)
    return get_category(category.pk)


def update_category(category_id, **fields):
    """
    Partially update a category; only the given fields change.

    Raises:
        NotFoundError: unknown id
        ValidationError: invalid field values
        ConflictError: renaming onto an existing name
    """
    category = get_category(category_id, with_counts=False)

    form = CategoryForm(fields, partial=True)
    if not form.is_valid():
        raise _validation_error(form)

    data = form.cleaned_data
    if "name" in data:
        _ensure_unique_name(data["name"], exclude_pk=category.pk)

    for field, value in data.items():
        setattr(category, field, value)
    try:
        with transaction.atomic():
            category.save()
    except IntegrityError:
        raise ConflictError(f'A category named "{category.name}" already exists.')

    logger.info("Updated category %s fields=%s", category.pk, sorted(data))
    return get_category(category.pk)


def delete_category(category_id):
    """
    Delete a category according to ``CATEGORY_DELETE_POLICY``.

    "cascade" removes the category's post links with it; "protect"
    raises ConflictError while any post still uses the category.
    """
    policy = blog_settings.CATEGORY_DELETE_POLICY
    with transaction.atomic():
        category = get_category(category_id, with_counts=False)
        if policy == PROTECT and category.is_referenced:
            logger.warning("Refused to delete category %s: still referenced", category.pk)
            raise ConflictError(
                f'Category "{category.name}" is used by {category.post_count} post(s).'
            )
        category.delete()
    logger.info("Deleted category %s (policy=%s)", category_id, policy)


# =============================================================================
# Posts
# =============================================================================

def _post_queryset():
    return Post.objects.prefetch_related("category_links__category")


def list_posts(published_only=False):
    """Return posts newest first, categories expanded."""
    qs = _post_queryset()
    if published_only:
        qs = qs.filter(published=True)
    return list(qs.order_by("-created_at"))


def get_post(post_id):
    try:
        return _post_queryset().get(pk=post_id)
    except Post.DoesNotExist:
        raise NotFoundError("Post not found.")


def _clean_post(data):
    form = PostForm(data)
    if not form.is_valid():
        raise _validation_error(form)

    cleaned = form.cleaned_data
    ids = cleaned["category_ids"]
    found = {str(category.pk): category for category in Category.objects.filter(pk__in=ids)}
    missing = [category_id for category_id in ids if category_id not in found]
    if missing:
        raise ValidationError(
            errors={"categoryIds": [f"Unknown category: {category_id}" for category_id in missing]}
        )
    cleaned["categories"] = [found[category_id] for category_id in ids]
    return cleaned


def create_post(data):
    """
    Create a post from a full document.

    ``data`` uses form field names (title, content, cover_image_url,
    category_ids, optional published). Posts are drafts unless
    ``published`` is given.
    """
    cleaned = _clean_post(data)
    with transaction.atomic():
        post = Post.objects.create(
            title=cleaned["title"],
            content=cleaned["content"],
            cover_image_url=cleaned["cover_image_url"],
            published=cleaned["published"] if "published" in data else False,
        )
        post.replace_categories(cleaned["categories"])

    logger.info("Created post %s (published=%s)", post.pk, post.published)
    return get_post(post.pk)


def update_post(post_id, data):
    """
    Replace a post with a full document.

    Scalars are overwritten and the category set is replaced wholesale,
    all in one transaction. ``published`` is only changed when present.
    When ``version`` is given it must match the stored version.

    Raises:
        NotFoundError: unknown id
        ValidationError: invalid document
        ConflictError: stale ``version``
    """
    cleaned = _clean_post(data)
    with transaction.atomic():
        try:
            post = Post.objects.select_for_update().get(pk=post_id)
        except Post.DoesNotExist:
            raise NotFoundError("Post not found.")

        expected = cleaned.get("version")
        if expected is not None and expected != post.version:
            logger.warning(
                "Rejected stale write to post %s (version %s, stored %s)",
                post.pk, expected, post.version,
            )
            raise ConflictError("This post was changed by someone else. Reload and try again.")

        post.title = cleaned["title"]
        post.content = cleaned["content"]
        post.cover_image_url = cleaned["cover_image_url"]
        if "published" in data:
            post.published = cleaned["published"]
        post.save()
        post.replace_categories(cleaned["categories"])

    logger.info("Updated post %s to version %s", post.pk, post.version)
    return get_post(post.pk)


def delete_post(post_id):
    deleted, _ = Post.objects.filter(pk=post_id).delete()
    if not deleted:
        raise NotFoundError("Post not found.")
    logger.info("Deleted post %s", post_id)


def duplicate_post(post_id):
    """Create an unpublished copy of a post with the same categories."""
    source = get_post(post_id)
    return create_post({
        "title": duplicate_title(source.title),
        "content": source.content,
        "cover_image_url": source.cover_image_url,
        "category_ids": source.category_ids,
    })


# =============================================================================
# Public read service
# =============================================================================

def list_published_posts():
    return list_posts(published_only=True)


def get_published_post(post_id, preview=False):
    """
    Return a post for public display.

    Raises:
        NotFoundError: unknown id
        AccessDeniedError: the post is a draft and ``preview`` is false
    """
    post = get_post(post_id)
    if not post.can_view(preview=preview):
        raise AccessDeniedError()
    return post
