from django.apps import AppConfig


class ConverterCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'papiconv.converter_core'
    verbose_name = 'Tournament Conversion Core'
