"""
Configuration settings for django-blog-cms.

Override these in your Django settings.py:

    BLOG_CMS = {
        'CATEGORY_DELETE_POLICY': 'protect',
        'CLIENT_TIMEOUT': 5,
        ...
    }
"""
from django.conf import settings

CASCADE = "cascade"
PROTECT = "protect"

DEFAULTS = {
    # What happens to post links when a category is deleted:
    # "cascade" drops the links, "protect" refuses while any post uses it.
    "CATEGORY_DELETE_POLICY": CASCADE,

    # Content rendering
    "ALLOWED_CONTENT_TAGS": [
        "b", "strong", "i", "em", "u", "br", "p", "div", "h1", "h2", "h3",
    ],

    # Posts
    "POST_TITLE_MAX_LENGTH": 100,
    "DUPLICATE_TITLE_SUFFIX": "(コピー)",

    # Categories
    "CATEGORY_NAME_MAX_LENGTH": 100,

    # Admin client
    "CLIENT_TIMEOUT": 10,
    "BULK_DELETE_WORKERS": 4,
}


class BlogCMSSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_cms.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_cms setting: {name}")

        user_settings = getattr(settings, "BLOG_CMS", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def CATEGORY_DELETE_POLICY(self):
        """Return the configured delete policy, rejecting unknown values."""
        user_settings = getattr(settings, "BLOG_CMS", {})
        policy = user_settings.get("CATEGORY_DELETE_POLICY", DEFAULTS["CATEGORY_DELETE_POLICY"])
        if policy not in (CASCADE, PROTECT):
            raise ValueError(f"Invalid CATEGORY_DELETE_POLICY: {policy!r}")
        return policy


blog_settings = BlogCMSSettings()
