from django.urls import re_path

from .verification import views

urlpatterns = [
    re_path(
        r"^duo/$",
        views.DuoMFAView.as_view(),
        name="duo_mfa_callback",
    ),
]
