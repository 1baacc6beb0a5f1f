from django.urls import path

from . import api

post_urlpatterns = [
    path("create/", api.PostCreateAPI.as_view(), name="post_create"),
    path("getposts/", api.PostListAPI.as_view(), name="post_list"),
    path("deletepost/<int:post_id>/<int:user_id>/", api.PostDeleteAPI.as_view(), name="post_delete"),
    path("updatepost/<int:post_id>/<int:user_id>/", api.PostUpdateAPI.as_view(), name="post_update"),
    path("home/", api.HomePostsAPI.as_view(), name="post_home"),
    path("post/<str:slug>/", api.PostBySlugAPI.as_view(), name="post_by_slug"),
]

comment_urlpatterns = [
    path("create/", api.CommentCreateAPI.as_view(), name="comment_create"),
    path("getPostComments/<int:post_id>/", api.PostCommentsAPI.as_view(), name="post_comments"),
    path("likeComment/<int:comment_id>/", api.CommentLikeAPI.as_view(), name="comment_like"),
    path("editComment/<int:comment_id>/", api.CommentEditAPI.as_view(), name="comment_edit"),
    path("deleteComment/<int:comment_id>/", api.CommentDeleteAPI.as_view(), name="comment_delete"),
    path("getcomments/", api.CommentListAPI.as_view(), name="comment_list"),
]

upload_urlpatterns = [
    path("blog-image/", api.BlogImageUploadAPI.as_view(), name="blog_image_upload"),
]
