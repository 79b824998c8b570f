"""
JSON shapes for posts and categories.

The wire format keeps the camelCase keys that front ends of this API
already consume (``coverImageURL``, ``categoryIds`` ...).
"""
from .sanitizer import sanitize_html

# wire key -> form/model field
FIELD_NAMES = {
    "coverImageURL": "cover_image_url",
    "categoryIds": "category_ids",
    "imageURL": "image_url",
}
WIRE_NAMES = {field: key for key, field in FIELD_NAMES.items()}


def from_wire(payload):
    """Translate a decoded JSON body into form field names."""
    return {FIELD_NAMES.get(key, key): value for key, value in payload.items()}


def wire_errors(errors):
    """Translate form errors ({field: [messages]}) into wire keys."""
    return {WIRE_NAMES.get(field, field): list(messages) for field, messages in errors.items()}


def serialize_category(category, with_count=False):
    data = {
        "id": str(category.id),
        "name": category.name,
        "imageURL": category.image_url or None,
        "description": category.description or None,
        "createdAt": category.created_at.isoformat(),
        "updatedAt": category.updated_at.isoformat(),
    }
    if with_count:
        data["postCount"] = category.post_count
    return data


def serialize_post(post, render=False):
    """
    Serialize a post with its categories expanded.

    With ``render=True`` a sanitized ``contentHtml`` is included for
    public display.
    """
    links = list(post.category_links.all())
    data = {
        "id": str(post.id),
        "title": post.title,
        "content": post.content,
        "coverImageURL": post.cover_image_url,
        "published": post.published,
        "version": post.version,
        "createdAt": post.created_at.isoformat(),
        "updatedAt": post.updated_at.isoformat(),
        "categories": [
            {"id": str(link.category_id), "name": link.category.name} for link in links
        ],
        "categoryIds": [str(link.category_id) for link in links],
    }
    if render:
        data["contentHtml"] = sanitize_html(post.content)
    return data
