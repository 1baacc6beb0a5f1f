"""
URL configuration for the ngo_platform project.

Every JSON endpoint lives under ``/api/``; the Django admin stays at ``/admin/``.
"""
from django.contrib import admin
from django.urls import include, path

from accounts import urls as accounts_urls
from blog import urls as blog_urls

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include(accounts_urls.auth_urlpatterns)),
    path('api/user/', include(accounts_urls.user_urlpatterns)),
    path('api/post/', include(blog_urls.post_urlpatterns)),
    path('api/comment/', include(blog_urls.comment_urlpatterns)),
    path('api/upload/', include(blog_urls.upload_urlpatterns)),
    path('api/visitor/', include('visitors.urls')),
    path('api/identity/', include('identity.urls')),
]
