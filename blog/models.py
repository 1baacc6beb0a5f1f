from django.conf import settings
from django.db import models

DEFAULT_CATEGORY = "uncategorized"


class Post(models.Model):
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="posts",
    )
    title = models.CharField(max_length=200)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        allow_unicode=True,
        help_text="URL-friendly version of the title",
    )
    content = models.TextField()
    image = models.URLField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=50, default=DEFAULT_CATEGORY, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]  # Show newest posts first
        indexes = [
            models.Index(fields=["category", "-created_at"], name="post_category_created_idx"),
            models.Index(fields=["author", "-created_at"], name="post_author_created_idx"),
            models.Index(fields=["-updated_at"], name="post_updated_idx"),
        ]

    def save(self, *args, **kwargs):
        self.title = (self.title or "").strip()
        self.category = (self.category or DEFAULT_CATEGORY).strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.title


class Comment(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    content = models.CharField(max_length=200)
    likes = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="liked_comments",
        blank=True,
    )
    number_of_likes = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["post", "-created_at"], name="comment_post_created_idx")]

    def __str__(self):
        return f"{self.author} on {self.post}"
