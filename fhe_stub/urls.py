from django.urls import path
from .views import handle_info, user_decrypt


urlpatterns = [
	path("handles/<str:handle>", handle_info),
	path("user-decrypt", user_decrypt),
]
