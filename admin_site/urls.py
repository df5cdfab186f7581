from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdminUserViewSet, AdminActivityLogViewSet

router = DefaultRouter()
router.register(r'users', AdminUserViewSet, basename='admin-user')
router.register(r'activity-logs', AdminActivityLogViewSet, basename='admin-activity-log')

urlpatterns = [
    path('', include(router.urls)),
]
