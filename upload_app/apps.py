from django.apps import AppConfig


class UploadAppConfig(AppConfig):
    name = 'upload_app'
    verbose_name = 'Image upload'
