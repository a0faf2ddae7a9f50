# Configuration settings for the work hours application

import pathlib

# --- Database Configuration ---
BASE_DIR = pathlib.Path(__file__).parent.resolve()
DATABASE_PATH = BASE_DIR / 'data.db'

# Names of the persisted blobs
ENTRIES_BLOB = 'entries'
PROJECTS_BLOB = 'projects'
OWNER_BLOB = 'owner'

# --- Logging Configuration ---
LOG_FILE_PATH = BASE_DIR / 'error.log'

# --- Export Configuration ---
EXPORT_PATH = BASE_DIR / 'work_hours.xlsx'
EXPORT_SHEET_TITLE = 'Hours'

# --- Time Configuration ---
TIME_INCREMENT_MINUTES = 15
TIMER_TICK_SECONDS = 1

# Monthly hours above which work counts as overtime
OVERTIME_THRESHOLD_HOURS = 160

# --- Projects ---
DEFAULT_PROJECTS = ['General']
