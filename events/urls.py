from django.urls import path, include
from .views import EventListCreateView

# Teams API is in separate file to keep the router's patterns isolated

urlpatterns = [
    path("", EventListCreateView.as_view(), name="event-list"),
    path("teams/", include("events.urls_teams")),
]
