from .catalog import EventCatalog
from .roster import TeamRoster
from .session import SessionManager
