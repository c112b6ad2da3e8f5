from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='upload_app:upload_page', permanent=False)),
    path('upload/', include('upload_app.urls', namespace='upload_app')),
]
