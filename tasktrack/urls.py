from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('django-admin/', admin.site.urls),

    path('api/', include('user.urls')),
    path('api/', include('management.urls')),
    path('api/admin/', include('admin_site.urls')),
]
