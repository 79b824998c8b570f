"""
HTML sanitizing for post content.

Only the configured inline/structural tags survive; attributes are never
allowed and any other markup is stripped, leaving its text behind.
"""
import bleach

from .conf import blog_settings


def sanitize_html(value):
    """Return ``value`` reduced to the allowed tags."""
    if not value:
        return ""
    return bleach.clean(
        value,
        tags=set(blog_settings.ALLOWED_CONTENT_TAGS),
        attributes={},
        protocols=[],
        strip=True,
        strip_comments=True,
    )
