"""
Search, filtering, sorting and bulk actions for the admin lists.

Everything here works on the collections already fetched through the
admin client; only deletes and refreshes go back to the server.
"""
import locale
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .conf import blog_settings
from .errors import BlogCMSError

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


def _matches(text, query):
    return query.casefold() in (text or "").casefold()


def search_posts(posts, query="", category_id=ALL_CATEGORIES):
    """Filter posts by title substring and by one category id (or all)."""
    return [
        post for post in posts
        if _matches(post["title"], query)
        and (
            category_id == ALL_CATEGORIES
            or any(c["id"] == category_id for c in post["categories"])
        )
    ]


def search_categories(categories, query=""):
    return [category for category in categories if _matches(category["name"], query)]


def sort_categories(categories, descending=False):
    """
    Sort categories by name using the current locale's collation.

    Case is ignored first and only breaks ties, so "apple" sorts before
    "Banana" even under the C locale.
    """
    return sorted(
        categories,
        key=lambda category: (
            locale.strxfrm(category["name"].casefold()),
            locale.strxfrm(category["name"]),
        ),
        reverse=descending,
    )


class Selection:
    """Set of selected ids in a list view."""

    def __init__(self):
        self.ids = set()

    def __contains__(self, item_id):
        return item_id in self.ids

    def __len__(self):
        return len(self.ids)

    def toggle(self, item_id):
        if item_id in self.ids:
            self.ids.discard(item_id)
        else:
            self.ids.add(item_id)

    def is_all_selected(self, visible_ids):
        visible_ids = set(visible_ids)
        return bool(visible_ids) and visible_ids <= self.ids

    def toggle_all(self, visible_ids):
        """Select every visible id, or clear when they are all selected."""
        visible_ids = set(visible_ids)
        if self.is_all_selected(visible_ids):
            self.clear()
        else:
            self.ids = visible_ids

    def clear(self):
        self.ids = set()


@dataclass
class BulkDeleteResult:
    deleted: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self):
        return not self.failed


def bulk_delete(delete, ids, max_workers=None):
    """
    Call ``delete(id)`` for every id concurrently.

    Failures do not stop the other deletes; each one is reported in the
    result with its error.
    """
    ids = list(ids)
    result = BulkDeleteResult()
    if not ids:
        return result

    workers = max_workers or blog_settings.BULK_DELETE_WORKERS
    with ThreadPoolExecutor(max_workers=min(workers, len(ids))) as executor:
        futures = {item_id: executor.submit(delete, item_id) for item_id in ids}
        for item_id, future in futures.items():
            try:
                future.result()
            except BlogCMSError as e:
                logger.warning("Bulk delete of %s failed: %s", item_id, e)
                result.failed[item_id] = e
            else:
                result.deleted.append(item_id)
    return result


class PostListing:
    """
    Admin post list: fetched posts plus search, filter and selection.
    """

    def __init__(self, client):
        self.client = client
        self.posts = []
        self.categories = []
        self.query = ""
        self.category_id = ALL_CATEGORIES
        self.selection = Selection()

    def refresh(self):
        with ThreadPoolExecutor(max_workers=2) as executor:
            posts = executor.submit(self.client.list_posts)
            categories = executor.submit(self.client.list_categories)
            self.posts = posts.result()
            self.categories = categories.result()
        known = {post["id"] for post in self.posts}
        self.selection.ids &= known

    @property
    def visible(self):
        return search_posts(self.posts, self.query, self.category_id)

    def toggle_all(self):
        self.selection.toggle_all(post["id"] for post in self.visible)

    def delete_selected(self):
        """Delete every selected post, then refresh once."""
        result = bulk_delete(self.client.delete_post, sorted(self.selection.ids))
        self.selection.ids -= set(result.deleted)
        self.refresh()
        return result

    def duplicate(self, post_id):
        post = self.client.duplicate_post(post_id)
        self.refresh()
        return post


class CategoryListing:
    """Admin category list with search and name sort."""

    def __init__(self, client):
        self.client = client
        self.categories = []
        self.query = ""
        self.descending = False
        self.selection = Selection()

    def refresh(self):
        self.categories = self.client.list_categories()
        known = {category["id"] for category in self.categories}
        self.selection.ids &= known

    @property
    def visible(self):
        return sort_categories(search_categories(self.categories, self.query), self.descending)

    def toggle_all(self):
        self.selection.toggle_all(category["id"] for category in self.visible)

    def delete_selected(self):
        result = bulk_delete(self.client.delete_category, sorted(self.selection.ids))
        self.selection.ids -= set(result.deleted)
        self.refresh()
        return result
