from django.urls import path
from .views import shares, positions


urlpatterns = [
	path("shares", shares),
	path("positions", positions),
]
