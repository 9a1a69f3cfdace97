"""Constants used throughout the average calculator service."""

# Server defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9876
DEFAULT_ENVIRONMENT = "development"
PRODUCTION_ENVIRONMENT = "production"

# Sliding window
DEFAULT_WINDOW_SIZE = 10
AVG_DECIMALS = 2

# Upstream fetch
DEFAULT_FETCH_TIMEOUT_MS = 500
MS_PER_SEC = 1000.0
# Upstream bodies are tiny; byte reads come from the socket buffer and keep the deadline check tight
FETCH_CHUNK_BYTES = 1

# Requests slower than this get a warning; nothing is enforced
DEFAULT_PROCESSING_WARN_MS = 450

# Upstream number feeds, one per category id
UPSTREAM_BASE_URL = "http://20.244.56.144/evaluation-service"
DEFAULT_ENDPOINTS = {
    "p": f"{UPSTREAM_BASE_URL}/primes",
    "f": f"{UPSTREAM_BASE_URL}/fibo",
    "e": f"{UPSTREAM_BASE_URL}/even",
    "r": f"{UPSTREAM_BASE_URL}/rand",
}

# Log rotation defaults
DEFAULT_LOG_MAX_BYTES = 10_485_760  # 10MB
DEFAULT_LOG_BACKUP_COUNT = 30
