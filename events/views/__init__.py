from .events import EventListCreateView
from .teams import TeamViewSet
from .rpc import GenerateTeamCodeView
