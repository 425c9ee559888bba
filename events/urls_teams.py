# events/urls_teams.py - Separate URL configuration for teams API

from rest_framework.routers import DefaultRouter
from .views.teams import TeamViewSet

router = DefaultRouter(trailing_slash=True)
router.include_root_view = False
router.register(r'', TeamViewSet, basename='teams')

urlpatterns = router.urls
