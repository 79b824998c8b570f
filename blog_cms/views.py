"""
JSON views for django-blog-cms.

Public endpoints serve published content; admin endpoints expose full
CRUD. Every error leaves as ``{"error": ...}`` with the status carried by
the exception.
"""
import json
import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from . import services
from .errors import BlogCMSError, StorageError, ValidationError
from .serializers import from_wire, serialize_category, serialize_post

logger = logging.getLogger(__name__)


def error_response(error):
    return JsonResponse(error.to_dict(), status=error.status_code)


@method_decorator(csrf_exempt, name="dispatch")
class JsonView(View):
    """Base view translating blog_cms errors into JSON responses."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except BlogCMSError as e:
            return error_response(e)
        except DatabaseError:
            logger.exception("Storage failure on %s %s", request.method, request.path)
            return error_response(StorageError())
        except Exception:
            logger.exception("Unexpected error on %s %s", request.method, request.path)
            return error_response(BlogCMSError())

    def http_method_not_allowed(self, request, *args, **kwargs):
        response = super().http_method_not_allowed(request, *args, **kwargs)
        return JsonResponse(
            {"error": "Method not allowed."},
            status=405,
            headers={"Allow": response["Allow"]},
        )

    def get_json(self):
        """Decode the request body as a JSON object."""
        try:
            payload = json.loads(self.request.body or b"{}")
        except ValueError:
            raise ValidationError("Request body is not valid JSON.")
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object.")
        return from_wire(payload)


# =============================================================================
# Public Views
# =============================================================================

class PostListView(JsonView):
    """List published posts, newest first."""

    def get(self, request):
        posts = services.list_published_posts()
        return JsonResponse([serialize_post(post, render=True) for post in posts], safe=False)


class PostDetailView(JsonView):
    """
    Display a single post, draft or not.

    Whether a draft may be shown is decided by the caller, which can see
    ``published`` in the response.
    """

    def get(self, request, pk):
        post = services.get_post(pk)
        return JsonResponse(serialize_post(post, render=True))


class CategoryListView(JsonView):
    """List categories without counts, or create one."""

    def get(self, request):
        categories = services.list_categories(with_counts=False)
        return JsonResponse([serialize_category(c) for c in categories], safe=False)

    def post(self, request):
        data = self.get_json()
        category = services.create_category(
            data.get("name"),
            image_url=data.get("image_url"),
            description=data.get("description"),
        )
        return JsonResponse(serialize_category(category), status=201)


# =============================================================================
# Admin Views
# =============================================================================

class AdminPostListView(JsonView):
    """All posts, drafts included."""

    def get(self, request):
        posts = services.list_posts()
        return JsonResponse([serialize_post(post) for post in posts], safe=False)

    def post(self, request):
        post = services.create_post(self.get_json())
        return JsonResponse(serialize_post(post), status=201)


class AdminPostDetailView(JsonView):
    def get(self, request, pk):
        return JsonResponse(serialize_post(services.get_post(pk)))

    def put(self, request, pk):
        post = services.update_post(pk, self.get_json())
        return JsonResponse(serialize_post(post))

    def delete(self, request, pk):
        services.delete_post(pk)
        return JsonResponse({"message": "Deleted."})


class AdminCategoryListView(JsonView):
    """Categories with post counts."""

    def get(self, request):
        categories = services.list_categories(with_counts=True)
        return JsonResponse(
            [serialize_category(c, with_count=True) for c in categories],
            safe=False,
        )

    def post(self, request):
        data = self.get_json()
        category = services.create_category(
            data.get("name"),
            image_url=data.get("image_url"),
            description=data.get("description"),
        )
        return JsonResponse(serialize_category(category, with_count=True), status=201)


class AdminCategoryDetailView(JsonView):
    fields = ("name", "image_url", "description")

    def get(self, request, pk):
        return JsonResponse(serialize_category(services.get_category(pk), with_count=True))

    def put(self, request, pk):
        data = self.get_json()
        changes = {field: data[field] for field in self.fields if field in data}
        category = services.update_category(pk, **changes)
        return JsonResponse(serialize_category(category, with_count=True))

    def delete(self, request, pk):
        services.delete_category(pk)
        return JsonResponse({"message": "Deleted."})
