"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DATA_FILE = Path(os.getenv("MEDLEDGER_DATA_FILE", str(PROJECT_ROOT / "data" / "ledger.json")))

# Tables
FILE_TABLE = os.getenv("MEDLEDGER_FILE_TABLE", "File Meds")
CLOSET_TABLE = os.getenv("MEDLEDGER_CLOSET_TABLE", "Closet Meds")
STASH_TABLE = os.getenv("MEDLEDGER_STASH_TABLE", "Stash")
ARCHIVE_TABLE = os.getenv("MEDLEDGER_ARCHIVE_TABLE", "Archive")
CATALOG_TABLE = os.getenv("MEDLEDGER_CATALOG_TABLE", "Locations")
ACTIVITY_TABLE = os.getenv("MEDLEDGER_ACTIVITY_TABLE", "Activity Log")

# Routing and privacy
CLOSET_KEYWORD = os.getenv("MEDLEDGER_CLOSET_KEYWORD", "closet")
STASH_LABEL = os.getenv("MEDLEDGER_STASH_LABEL", "Stash")
ALIAS_MARKER = os.getenv("MEDLEDGER_ALIAS_MARKER", "sparkles++")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_FILE = os.getenv("LOG_FILE", "")
