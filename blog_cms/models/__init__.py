"""
Models for django-blog-cms.

All models are importable from blog_cms.models:

    from blog_cms.models import Post, Category, PostCategory
"""
from .posts import Category, Post, PostCategory

__all__ = [
    "Category",
    "Post",
    "PostCategory",
]
