# apps/api/urls.py
"""
Main API URL configuration for the stockroom service.

/api/v1/         stock counts, item catalog, location and bin directory, JWT tokens
/api/schema/     OpenAPI schema generated by drf-spectacular
/api/docs/       Swagger UI
/api/redoc/      ReDoc
"""
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

urlpatterns = [
    # Versioned endpoints (stock counts, catalog, directory, tokens)
    path('v1/', include('apps.api.v1.urls')),

    # Schema for the stock count API
    path('schema/', SpectacularAPIView.as_view(), name='schema'),

    # Browsable documentation
    path('docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
