"""
URL configuration for django-blog-cms.

Include in your project urls.py:

    path('api/', include('blog_cms.urls')),
"""
from django.urls import path

from . import views

app_name = "blog_cms"

urlpatterns = [
    # Public
    path("posts", views.PostListView.as_view(), name="post_list"),
    path("posts/<uuid:pk>", views.PostDetailView.as_view(), name="post_detail"),
    path("categories", views.CategoryListView.as_view(), name="category_list"),

    # Admin
    path("admin/posts", views.AdminPostListView.as_view(), name="admin_post_list"),
    path("admin/posts/<uuid:pk>", views.AdminPostDetailView.as_view(), name="admin_post_detail"),
    path("admin/categories", views.AdminCategoryListView.as_view(), name="admin_category_list"),
    path(
        "admin/categories/<uuid:pk>",
        views.AdminCategoryDetailView.as_view(),
        name="admin_category_detail",
    ),
]
