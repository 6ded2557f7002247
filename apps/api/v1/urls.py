# apps/api/v1/urls.py
"""
URL routing for API v1.

All API endpoints are mounted under /api/v1/
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)

from .views.items import ItemViewSet
from .views.warehousing import LocationViewSet, BinViewSet
from .views.stock_counts import StockCountViewSet

# Create router and register viewsets
router = DefaultRouter()

# Catalog
router.register(r'items', ItemViewSet, basename='item')

# Warehousing
router.register(r'locations', LocationViewSet, basename='location')
router.register(r'bins', BinViewSet, basename='bin')

# Stock counts
router.register(r'stock-counts', StockCountViewSet, basename='stockcount')

urlpatterns = [
    # JWT Authentication endpoints
    path('token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Router URLs (all ViewSets)
    path('', include(router.urls)),
]
