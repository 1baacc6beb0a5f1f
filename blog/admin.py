from django.contrib import admin

from .models import Comment, Post


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "author", "category", "created_at")
    search_fields = ("title", "slug", "author__username")
    list_filter = ("category", "created_at")
    readonly_fields = ("slug",)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("author", "post", "number_of_likes", "created_at")
    search_fields = ("content", "author__username", "post__title")
    list_filter = ("created_at",)
