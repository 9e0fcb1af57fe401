# SQLite location sentinel for a private, non-persistent database
MEMORY_DATABASE = ":memory:"

# Compression policy
COMPRESSION_MIN_LENGTH = 1024  # Payloads below this many bytes are never compressed
COMPRESSION_LEVEL = 6  # gzip level used for stored payloads

# Expiration sweeper
SWEEP_INTERVAL_MS = 500  # Periodic sweep cadence
SWEEPER_THREAD_NAME = "sqlcache-sweeper"
SWEEPER_JOIN_TIMEOUT = 5.0  # Seconds close() waits for an in-flight sweep

# SQLite store
SQLITE_TIMEOUT = 5.0  # Seconds to wait on a locked database file
