"""
Template filters for rendering post content.
"""
from django import template
from django.utils.safestring import mark_safe

from ..sanitizer import sanitize_html

register = template.Library()


@register.filter(name="sanitize_content")
def sanitize_content(value):
    """Render post content with only the allowed tags kept."""
    return mark_safe(sanitize_html(value))
