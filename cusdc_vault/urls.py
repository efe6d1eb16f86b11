"""URL routing for API + local stubs (native currency, confidential compute, router).


The /api/ namespace exposes the vault operations; /stub/* exposes deterministic stubs
used by adapters. In production, stubs are replaced by the real chain, relayer and router.
"""

from django.contrib import admin
from django.urls import path, include


urlpatterns = [
	path("admin/", admin.site.urls),
	path("api/", include("api.urls")),
	path("stub/native/", include("native_stub.urls")),
	path("stub/fhe/", include("fhe_stub.urls")),
	path("stub/router/", include("router_stub.urls")),
]
