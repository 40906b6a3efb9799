from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import SongJobViewSet, health

router = DefaultRouter()
router.register(r'songs', SongJobViewSet, basename='songs')

urlpatterns = [
    path('', include(router.urls)),
    path('health/', health, name='health'),
]
