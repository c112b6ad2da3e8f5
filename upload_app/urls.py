from django.urls import path

from . import views

app_name = 'upload_app'

urlpatterns = [
    path("", views.upload_page, name="upload_page"),
    path("push", views.push_upload, name="push_upload"),
    path("status", views.upload_status, name="upload_status"),
]
