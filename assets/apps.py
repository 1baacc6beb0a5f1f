from django.apps import AppConfig


class AssetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "assets"
    verbose_name = "Hosted Assets"

    def ready(self):
        from . import hosting

        hosting.configure()
