"""
Admin post editor.

Holds the editable copy of one post, compares it against the last saved
snapshot to decide whether there are unsaved changes, and submits the
whole document on save.
"""
import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .errors import ValidationError
from .forms import PostForm, form_errors
from .serializers import from_wire, wire_errors

logger = logging.getLogger(__name__)


class EditorState(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    ERROR = "error"


class EditorError(Exception):
    """Raised for actions the editor's current state does not allow."""


@dataclass(frozen=True)
class PostSnapshot:
    """Immutable value of everything the editor can change."""

    title: str = ""
    content: str = ""
    cover_image_url: str = ""
    published: bool = False
    category_ids: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_post(cls, post):
        """Build a snapshot from a post as returned by the API."""
        return cls(
            title=post["title"],
            content=post["content"],
            cover_image_url=post["coverImageURL"] or "",
            published=post["published"],
            category_ids=frozenset(post["categoryIds"]),
        )


class PostEditor:
    """
    Editing session for a single post.

    States go LOADING -> READY -> SAVING -> READY (or ERROR, from which a
    save can be retried). Whether there are unsaved changes is not tracked
    per field: ``is_dirty`` compares the current values as a whole with
    the snapshot taken at load or at the last successful save.
    """

    LEAVE_WARNING = "You have unsaved changes. Leave this page anyway?"

    def __init__(self, client, post_id):
        self.client = client
        self.post_id = post_id
        self.state = EditorState.LOADING
        self.categories = []
        self.errors = {}
        self.version = None
        self.baseline = None

        self.title = ""
        self.content = ""
        self.cover_image_url = ""
        self.published = False
        self.category_ids = []

    def load(self):
        """Fetch the post and the category list in parallel."""
        self.state = EditorState.LOADING
        with ThreadPoolExecutor(max_workers=2) as executor:
            post_future = executor.submit(self.client.get_post, self.post_id)
            categories_future = executor.submit(self.client.list_categories)
            try:
                post = post_future.result()
                categories = categories_future.result()
            except Exception:
                self.state = EditorState.ERROR
                logger.warning("Could not load post %s for editing", self.post_id)
                raise

        self.categories = list(categories)
        self._apply(post)
        self.baseline = self.snapshot
        self.state = EditorState.READY
        return post

    def _apply(self, post):
        self.title = post["title"]
        self.content = post["content"]
        self.cover_image_url = post["coverImageURL"] or ""
        self.published = post["published"]
        self.category_ids = list(post["categoryIds"])
        self.version = post.get("version")

    @property
    def snapshot(self):
        return PostSnapshot(
            title=self.title,
            content=self.content,
            cover_image_url=self.cover_image_url,
            published=self.published,
            category_ids=frozenset(self.category_ids),
        )

    @property
    def is_dirty(self):
        return self.baseline is not None and self.snapshot != self.baseline

    @property
    def can_save(self):
        return self.state in (EditorState.READY, EditorState.ERROR) and self.is_dirty

    # Field edits

    def set_title(self, value):
        self.title = value

    def set_content(self, value):
        self.content = value

    def set_cover_image_url(self, value):
        self.cover_image_url = value

    def set_published(self, value):
        self.published = bool(value)

    def toggle_category(self, category_id):
        """Select ``category_id`` if unselected, otherwise unselect it."""
        category_id = str(category_id)
        if category_id in self.category_ids:
            self.category_ids.remove(category_id)
        else:
            self.category_ids.append(category_id)

    def add_category(self, name):
        """Create a category right away and select it."""
        category = self.client.create_category(name)
        self.categories.append(category)
        if category["id"] not in self.category_ids:
            self.category_ids.append(category["id"])
        return category

    # Saving

    def document(self):
        """Return the full document submitted on save."""
        document = {
            "title": self.title,
            "content": self.content,
            "coverImageURL": self.cover_image_url,
            "published": self.published,
            "categoryIds": list(self.category_ids),
        }
        if self.version is not None:
            document["version"] = self.version
        return document

    def validate(self):
        """Return field errors keyed by wire name; empty when valid."""
        form = PostForm(from_wire(self.document()))
        if form.is_valid():
            return {}
        return wire_errors(form_errors(form))

    def save(self):
        """
        Submit the document and make it the new baseline.

        Raises:
            EditorError: nothing changed, or a save is already running
            ValidationError: client-side validation failed
            BlogCMSError: the server rejected the save (state becomes ERROR)
        """
        if self.state == EditorState.SAVING:
            raise EditorError("A save is already in progress.")
        if not self.can_save:
            raise EditorError("There are no changes to save.")

        self.errors = self.validate()
        if self.errors:
            raise ValidationError(errors=self.errors)

        submitted = self.snapshot
        self.state = EditorState.SAVING
        try:
            post = self.client.update_post(self.post_id, self.document())
        except Exception as e:
            self.state = EditorState.ERROR
            self.errors = getattr(e, "errors", {})
            logger.warning("Saving post %s failed: %s", self.post_id, e)
            raise

        self.version = post.get("version", self.version)
        self.baseline = submitted
        self.state = EditorState.READY
        return post

    # Navigation

    def before_unload(self):
        """Return the warning to show when the page unloads, or None."""
        return self.LEAVE_WARNING if self.is_dirty else None

    def request_leave(self, confirm):
        """
        Ask whether leaving is fine.

        ``confirm`` is called with the warning text only when there are
        unsaved changes; its answer decides.
        """
        if not self.is_dirty:
            return True
        return bool(confirm(self.LEAVE_WARNING))
