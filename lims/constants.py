"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
DEFAULT_PAGE_SIZE = 50
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE = 1

# OFFSET is bound as a signed 64-bit integer
MAX_OFFSET = 2**63 - 1

DIRECTION_NEXT = "next"
DIRECTION_PREV = "prev"

# =============================================================================
# Sort Options
# =============================================================================
SORT_ASC = "ASC"
SORT_DESC = "DESC"
DEFAULT_SORT_ORDER = SORT_DESC

# =============================================================================
# Cursors
# =============================================================================
CURSOR_DELIMITER = "|"

# SQLAlchemy's storage format for DateTime columns on SQLite
TIMESTAMP_STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# =============================================================================
# Identifier validation
# =============================================================================
DEFAULT_MAX_FIELD_LENGTH = 64
DEFAULT_MIN_FIELD_LENGTH = 1

SQL_RESERVED_WORDS = frozenset({
    "SELECT", "FROM", "WHERE", "INSERT", "UPDATE", "DELETE", "DROP", "CREATE",
    "ALTER", "UNION", "JOIN", "ORDER", "GROUP", "HAVING", "EXISTS", "AND",
    "OR", "NOT", "NULL", "AS", "TABLE", "INDEX", "VIEW", "TRIGGER",
    "PROCEDURE", "FUNCTION", "INTO", "VALUES", "SET", "EXEC", "EXECUTE",
    "DECLARE", "GRANT", "REVOKE", "COMMIT", "ROLLBACK", "SAVEPOINT",
    "TRUNCATE", "REPLACE", "MERGE", "CALL", "EXPLAIN", "DESCRIBE", "SHOW",
    "USE", "BEGIN",
})

# =============================================================================
# Search
# =============================================================================
LIKE_ESCAPE_CHAR = "\\"
