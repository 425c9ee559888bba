from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView
from events.views import GenerateTeamCodeView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/events/', include('events.urls')),
    path('api/rpc/generate_team_code/', GenerateTeamCodeView.as_view(), name='rpc-generate-team-code'),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
