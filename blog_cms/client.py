"""
HTTP client for the blog_cms JSON API.

Used by the admin editor and list helpers. Every request carries a
timeout; transport failures and 5xx responses raise StorageError, other
error responses raise the matching blog_cms error.
"""
import logging

import requests

from .conf import blog_settings
from .errors import AccessDeniedError, StorageError, error_for_status
from .forms import duplicate_title
from .serializers import WIRE_NAMES

logger = logging.getLogger(__name__)


class AdminClient:
    """
    Thin wrapper around the admin and public endpoints.

    Args:
        base_url: API prefix, e.g. "https://blog.example.com/api"
        session: requests.Session-like object (anything with ``request``)
        timeout: seconds per request; defaults to CLIENT_TIMEOUT
    """

    def __init__(self, base_url, session=None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else blog_settings.CLIENT_TIMEOUT

    def _request(self, method, path, json=None, params=None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method, url, json=json, params=params, timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error("%s %s timed out after %ss", method, url, self.timeout)
            raise StorageError("The server did not respond in time.")
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise StorageError("Could not reach the server.")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            raise error_for_status(response.status_code, payload)
        return payload

    # Posts

    def list_posts(self):
        """All posts, drafts included."""
        return self._request("GET", "admin/posts")

    def list_published_posts(self):
        return self._request("GET", "posts")

    def get_published_post(self, post_id, preview=False):
        """Fetch a post for reading; drafts raise AccessDeniedError unless previewing."""
        post = self._request("GET", f"posts/{post_id}")
        if not post["published"] and not preview:
            raise AccessDeniedError()
        return post

    def get_post(self, post_id):
        return self._request("GET", f"admin/posts/{post_id}")

    def create_post(self, document):
        return self._request("POST", "admin/posts", json=document)

    def update_post(self, post_id, document):
        return self._request("PUT", f"admin/posts/{post_id}", json=document)

    def delete_post(self, post_id):
        return self._request("DELETE", f"admin/posts/{post_id}")

    def duplicate_post(self, post_id):
        """Read a post and create an unpublished copy of it."""
        source = self.get_post(post_id)
        return self.create_post({
            "title": duplicate_title(source["title"]),
            "content": source["content"],
            "coverImageURL": source["coverImageURL"],
            "categoryIds": source["categoryIds"],
        })

    # Categories

    def list_categories(self):
        """Categories with post counts."""
        return self._request("GET", "admin/categories")

    def get_category(self, category_id):
        return self._request("GET", f"admin/categories/{category_id}")

    def create_category(self, name, image_url=None, description=None):
        document = {"name": name}
        if image_url:
            document["imageURL"] = image_url
        if description:
            document["description"] = description
        return self._request("POST", "admin/categories", json=document)

    def update_category(self, category_id, **fields):
        document = {WIRE_NAMES.get(field, field): value for field, value in fields.items()}
        return self._request("PUT", f"admin/categories/{category_id}", json=document)

    def delete_category(self, category_id):
        return self._request("DELETE", f"admin/categories/{category_id}")
