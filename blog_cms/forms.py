"""
Input validation for posts and categories.

The same forms validate on the server (services) and in the admin editor
before a save is submitted.
"""
import uuid
from urllib.parse import urlsplit

from django import forms
from django.core.exceptions import ValidationError

from .conf import blog_settings


def validate_http_url(value):
    """Accept absolute http(s) URLs with a host."""
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc or " " in value:
        raise ValidationError("Enter a valid URL.", code="invalid")


def form_errors(form):
    """Flatten a bound form's errors to {field: [message, ...]}."""
    return {
        field: [error["message"] for error in items]
        for field, items in form.errors.get_json_data().items()
    }


def duplicate_title(title):
    """Append the copy suffix, shortening ``title`` so the result still fits."""
    suffix = blog_settings.DUPLICATE_TITLE_SUFFIX
    limit = blog_settings.POST_TITLE_MAX_LENGTH - len(suffix)
    return title[:limit] + suffix


class CategoryIdsField(forms.Field):
    """A list of category UUIDs, de-duplicated in submission order."""

    default_error_messages = {
        "required": "Select at least one category.",
        "invalid": "Enter a list of category ids.",
        "invalid_id": "%(value)s is not a valid category id.",
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages["invalid"], code="invalid")

        ids = []
        for item in value:
            try:
                category_id = str(uuid.UUID(str(item)))
            except ValueError:
                raise ValidationError(
                    self.error_messages["invalid_id"],
                    code="invalid_id",
                    params={"value": item},
                )
            if category_id not in ids:
                ids.append(category_id)
        return ids


class PostForm(forms.Form):
    """Full post document as submitted on create and update."""

    title = forms.CharField(
        max_length=blog_settings.POST_TITLE_MAX_LENGTH,
        strip=False,
        error_messages={
            "required": "Enter a title.",
            "max_length": "Title is too long.",
        },
    )
    content = forms.CharField(strip=False, error_messages={"required": "Enter the post body."})
    cover_image_url = forms.CharField(
        max_length=500,
        validators=[validate_http_url],
        error_messages={"required": "A cover image URL is required."},
    )
    category_ids = CategoryIdsField()
    published = forms.BooleanField(required=False)
    version = forms.IntegerField(required=False, min_value=1)

    def _require_text(self, name):
        # Stored as typed; whitespace-only still counts as missing.
        value = self.cleaned_data[name]
        if not value.strip():
            raise forms.ValidationError(self.fields[name].error_messages["required"], code="required")
        return value

    def clean_title(self):
        return self._require_text("title")

    def clean_content(self):
        return self._require_text("content")


class CategoryForm(forms.Form):
    """
    Category fields.

    With ``partial=True`` only the fields present in ``data`` are
    validated, which is how updates work.
    """

    name = forms.CharField(
        max_length=blog_settings.CATEGORY_NAME_MAX_LENGTH,
        error_messages={"required": "Enter a name."},
    )
    image_url = forms.CharField(max_length=500, required=False, validators=[validate_http_url])
    description = forms.CharField(required=False, widget=forms.Textarea)

    def __init__(self, data=None, partial=False, **kwargs):
        super().__init__(data, **kwargs)
        if partial and data is not None:
            for name in list(self.fields):
                if name not in data:
                    del self.fields[name]
