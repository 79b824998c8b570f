"""
Tests for the Django admin integration and settings.
"""
import pytest
from django.contrib import admin

from blog_cms import services
from blog_cms.admin import CategoryAdmin, PostAdmin
from blog_cms.conf import blog_settings
from blog_cms.models import Category, Post


@pytest.fixture
def post_admin(monkeypatch):
    model_admin = PostAdmin(Post, admin.site)
    model_admin.sent = []
    monkeypatch.setattr(
        model_admin, "message_user", lambda request, message, *args: model_admin.sent.append(message)
    )
    return model_admin


class TestAdmin:
    def test_models_registered(self):
        assert admin.site.is_registered(Post)
        assert admin.site.is_registered(Category)

    def test_publish_and_unpublish_actions(self, rf, post_admin, post):
        request = rf.post("/")
        post_admin.publish_posts(request, Post.objects.all())
        assert Post.objects.get(pk=post.pk).published
        post_admin.unpublish_posts(request, Post.objects.all())
        assert not Post.objects.get(pk=post.pk).published
        assert post_admin.sent == ["1 posts published.", "1 posts unpublished."]

    def test_duplicate_action(self, rf, post_admin, post):
        post_admin.duplicate_posts(rf.post("/"), Post.objects.filter(pk=post.pk))
        assert Post.objects.filter(title="Hi(コピー)", published=False).count() == 1
        assert post_admin.sent == ["1 posts duplicated."]

    def test_category_post_count_column(self, rf, post, category):
        model_admin = CategoryAdmin(Category, admin.site)
        obj = model_admin.get_queryset(rf.get("/")).get(pk=category.pk)
        assert model_admin.post_count(obj) == 1


class TestSettings:
    def test_defaults(self):
        assert blog_settings.POST_TITLE_MAX_LENGTH == 100
        assert blog_settings.DUPLICATE_TITLE_SUFFIX == "(コピー)"
        assert blog_settings.CATEGORY_DELETE_POLICY == "cascade"

    def test_project_override(self):
        assert blog_settings.CLIENT_TIMEOUT == 5

    def test_unknown_setting(self):
        with pytest.raises(AttributeError):
            blog_settings.NOT_A_SETTING

    def test_invalid_delete_policy(self, settings, db, category):
        settings.BLOG_CMS = {"CATEGORY_DELETE_POLICY": "orphan"}
        with pytest.raises(ValueError):
            services.delete_category(category.pk)
