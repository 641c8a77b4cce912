"""
Application-wide constants
"""

# Schedule evaluation windows (minutes)
SLOT_MATCH_TOLERANCE_MINUTES = 120
ACTION_WINDOW_MINUTES = 60

# Store tables
HABIT_TABLE = "habit"
RECORD_TABLE = "habitRecords"
PUSH_TABLE = "pushSub"

# History
HISTORY_DEFAULT_LIMIT = 10
HISTORY_MAX_LIMIT = 100

# Provisional record ids
PROVISIONAL_ID_PREFIX = "tmp-"

# Scheduler
SESSION_CLEANUP_INTERVAL_MINUTES = 10
