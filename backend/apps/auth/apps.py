from django.apps import AppConfig


class AuthConfig(AppConfig):
    name = 'apps.auth'
    # Use a unique label to avoid clashing with django.contrib.auth
    label = 'storefront_auth'
    verbose_name = 'Storefront session'
