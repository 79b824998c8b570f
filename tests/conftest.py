"""
Shared fixtures for django-blog-cms tests.
"""
from json import dumps
from urllib.parse import urlencode, urlsplit

import pytest

from blog_cms import services
from blog_cms.client import AdminClient

COVER = "https://example.com/cover.png"


class DjangoTestSession:
    """
    requests.Session stand-in that routes calls through Django's test client.

    Lets AdminClient talk to the real views without a server.
    """

    def __init__(self, client):
        self.client = client
        self.calls = []
        self.params = []

    def request(self, method, url, json=None, params=None, timeout=None):
        self.calls.append((method, url, timeout))
        self.params.append(params)
        path = urlsplit(url).path
        if params:
            path = f"{path}?{urlencode(params)}"
        body = dumps(json) if json is not None else ""
        return self.client.generic(method, path, body, content_type="application/json")


@pytest.fixture
def category(db):
    """Create a test category."""
    return services.create_category("Tech")


@pytest.fixture
def other_category(db):
    return services.create_category("Life")


@pytest.fixture
def post(db, category):
    """Create a draft post in the Tech category."""
    return services.create_post({
        "title": "Hi",
        "content": "World",
        "cover_image_url": COVER,
        "category_ids": [str(category.pk)],
    })


@pytest.fixture
def session(client):
    return DjangoTestSession(client)


@pytest.fixture
def api(db, session):
    """AdminClient wired to the test URLconf."""
    return AdminClient("http://testserver/api", session=session)
