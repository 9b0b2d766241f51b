"""Constants for burrow."""

from __future__ import annotations

# Default values
DEFAULT_TYPE = "task"
DEFAULT_PRIORITY = 2

# Maximum title length enforced on insert (mirrors the schema CHECK)
MAX_TITLE_LENGTH = 500

# Store-level config keys (rows in the SQLite ``config`` table)
ISSUE_PREFIX_KEY = "issue_prefix"
CUSTOM_STATUSES_KEY = "status.custom"
CUSTOM_TYPES_KEY = "types.custom"

# Tool config
BURROW_DIRNAME = ".burrow"
CONFIG_FILENAME = "config.toml"
DEFAULT_DB_FILENAME = "burrow.db"

# Progressive ID length scaling thresholds
# Tuple of (max_issue_count, id_length)
# IDs scale: 4 chars for 0-500 issues, 5 chars for 501-1500, 6+ beyond
ID_LENGTH_THRESHOLDS = (
    (500, 4),
    (1500, 5),
    (5000, 6),
)
ID_LENGTH_MAX = 7
# Generated keys never grow past this length
ID_LENGTH_CEILING = 8
# Nonces tried at each length before growing the key
ID_NONCES_PER_LENGTH = 10

# Fields that make up the content fingerprint. Frozen: any change here
# invalidates every stored content_hash.
CONTENT_HASH_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "design",
    "acceptance",
    "notes",
    "status",
    "priority",
    "issue_type",
    "owner",
    "external_ref",
    "close_reason",
    "parent",
    "labels",
    "metadata",
)

# Fields recorded in the creation event (content fields only)
TRACKED_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "labels",
        "external_ref",
        "issue_type",
        "priority",
        "parent",
        "acceptance",
        "notes",
        "design",
        "status",
        "owner",
    },
)
