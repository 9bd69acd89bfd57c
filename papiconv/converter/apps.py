from django.apps import AppConfig


class ConverterConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'papiconv.converter'
    verbose_name = 'PAPI File Conversion'
