"""URL configuration for FlyNext project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

from apps.finances.views import CheckoutView
from apps.hotels.views import CityListView

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/cities/', CityListView.as_view(), name='city-list'),
    path('api/v1/hotels/', include('apps.hotels.urls')),
    path('api/v1/flights/', include('apps.flights.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/checkout/', CheckoutView.as_view(), name='checkout'),
    path('api/v1/finances/', include('apps.finances.urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
]
