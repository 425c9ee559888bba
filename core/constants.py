# core/constants.py

# --- Team shape ---
TEAM_SIZE = 4
MEMBER_POSITIONS = tuple(range(1, TEAM_SIZE + 1))

# --- Event defaults ---
DEFAULT_MAX_TEAMS = 20

# --- Team codes ---
# No 0/O or 1/I so codes survive being read aloud or handwritten
TEAM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
TEAM_CODE_MAX_ATTEMPTS = 10

# --- Field limits (mirror the model max_length values) ---
EVENT_NAME_MAX_LENGTH = 200
TEAM_NAME_MAX_LENGTH = 100
MEMBER_NAME_MAX_LENGTH = 150
MEMBER_EMAIL_MAX_LENGTH = 254
DESCRIPTION_MAX_LENGTH = 5000

# --- Activity verbs (log records) ---
ACTIVITY_EVENT_CREATED = "event.created"
ACTIVITY_TEAM_CREATED = "team.created"
ACTIVITY_TEAM_RENAMED = "team.renamed"
ACTIVITY_TEAM_MEMBERS_REPLACED = "team.members_replaced"
ACTIVITY_TEAM_DELETED = "team.deleted"
