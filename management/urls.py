from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'projects', views.ProjectViewSet, basename='project')
router.register(r'tasks', views.TaskViewSet, basename='task')
router.register(r'time-logs', views.TimeLogViewSet, basename='timelog')
router.register(r'notifications', views.NotificationViewSet, basename='notification')

urlpatterns = [
    path('', include(router.urls)),

    # Aggregates and app shell
    path('dashboard/', views.DashboardView.as_view(), name='dashboard'),
    path('reports/', views.ReportView.as_view(), name='reports'),
    path('calendar/', views.CalendarView.as_view(), name='calendar'),
    path('navigation/', views.NavigationView.as_view(), name='navigation'),
]
