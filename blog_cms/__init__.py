"""
django-blog-cms - A Django blog content-management app.

Features:
- Posts linked to many categories through an explicit join model
- Draft/publish visibility with a read-only preview override
- Transactional replacement of a post's categories
- Optimistic concurrency via a per-post version counter
- Allow-list HTML sanitizing for rendered content
- A requests-based admin client, post editor and list helpers
"""

__version__ = "0.1.0"
