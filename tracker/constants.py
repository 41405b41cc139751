STUDYING = "Studying"
SLEEPING = "Sleeping"
WASTED = "Wasted"

MISC_PREFIX = "MISC-"
MISC_MENU = "MISC"
BACK = "Back"

MAIN_ACTIVITIES = [STUDYING, SLEEPING, WASTED, MISC_MENU]
MISC_ACTIVITIES = [
    "MISC-BREAK",
    "MISC-GYM",
    "MISC-WOKE_UP",
    "MISC-BREAKFAST",
    "MISC-LUNCH",
    "MISC-DINNER",
]
ACTIVITY_COLORS = {
    STUDYING: "#b8eab8",
    SLEEPING: "#add8e6",
    WASTED: "#ffcccb",
}
MISC_COLOR = "#fff5c0"

HOURS_PER_DAY = 24
HALVES = ("first", "second")
HALF_HOUR = 0.5
# Half-hour sums are exact in binary, the epsilon only guards the display warning.
ACCOUNTED_EPSILON = 0.001

POST_ACTIVITY_PATTERNS = {
    "MISC-GYM": "Post Gym",
    "MISC-LUNCH": "Post Lunch",
    "MISC-BREAKFAST": "Post Breakfast",
    "MISC-DINNER": "Post Dinner",
    "MISC-BREAK": "Post BREAK",
    "MISC-WOKE_UP": "Post Wakeup",
}
PRE_SLEEP_PATTERN = "Pre Sleep"
SLEEP_RANGE = (22, 4)

WASTED_REASONS = [
    "Phone",
    "Social media",
    "YouTube",
    "Overthinking",
    "Tired",
    "Distracted",
]

TOTAL_KINDS = ("study", "sleep", "wasted")

STORAGE_DAILY = "TT_DAILY"
STORAGE_HOURLY = "TT_HOURLY"
STORAGE_PATTERNS = "TT_PATTERNS"
STORAGE_MANUAL_PATTERNS = "TT_MANUAL_PATTERNS"
STORAGE_REFLECTIONS = "TT_REFLECTIONS"
STORAGE_POMODORO = "TT_POMODORO"
STORAGE_HAPPINESS_ITEMS = "tt_happiness_items"
STORAGE_HAPPINESS_STATUS = "tt_happiness_status"
STORAGE_ACCOUNTABILITY_DATA = "ACCOUNTABILITY_DATA"
STORAGE_ACCOUNTABILITY_PROBLEMS = "ACCOUNTABILITY_PROBLEMS"
STORAGE_ANON_ID = "TT_ANON_ID"
DS_KEY = "DATA_SOURCE"

SOURCE_LOCAL = "local"
SOURCE_LIVE_PREFIX = "live:"

WIRE_DAILY = "dailyData"
WIRE_HOURLY = "hourlyData"
WIRE_PATTERNS = "wastedPatterns"
WIRE_MANUAL_PATTERNS = "manualPatterns"
WIRE_REFLECTIONS = "reflections"
WIRE_UPDATED_AT = "updatedAt"

EXPORT_FILENAME_PREFIX = "time-tracker-backup-"

POMODORO_MAX_HOURS = 10
POMODORO_MAX_MINUTES = 59
POMODORO_TICK_SECONDS = 1.0
NOT_SET_TASK = "Not set"

MAX_HAPPINESS_ITEMS = 6
MAX_HAPPINESS_LABEL = 40

READ_ONLY_MESSAGE = "Read-only in LIVE mode. Switch to “Your Tracker (private)” to edit."
PAST_DAY_MESSAGE = "Cannot edit past days."
IMPORT_LOCAL_ONLY_MESSAGE = "Switch to “Your Tracker (private)” to import your own data."
IMPORT_INVALID_MESSAGE = "Import failed: invalid JSON"
TIME_IS_UP_MESSAGE = "Time is up!"
