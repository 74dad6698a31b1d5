from django.contrib import admin
from django.urls import path

from pingkeeper.server import server_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('pingback/', server_view),
]
