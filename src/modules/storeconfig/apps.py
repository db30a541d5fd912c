from django.apps import AppConfig


class StoreConfigConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.storeconfig"
    label = "storeconfig"
