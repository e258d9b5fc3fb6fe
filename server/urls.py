"""Root URL configuration.

Only the admin site is routed; team pages are served by an external
presentation layer that calls the ``logic`` packages directly.
"""

from django.contrib import admin
from django.urls import path

admin.site.site_header = 'Team file workflow'

urlpatterns = [
    path('admin/', admin.site.urls),
]
