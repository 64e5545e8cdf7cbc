"""
Constants for editor_finder package.

Centralizes magic numbers and configuration defaults.
"""

# Entity resolution
DEFAULT_FUZZY_THRESHOLD = 0.8  # Tolerates typo/transliteration variance

# Fallback policy
DEFAULT_MIN_TEXT_HITS = 2  # Free-text queries with fewer local hits trigger discovery

# Local query defaults
DEFAULT_RESULT_CAP = 50
LOCAL_SCAN_LIMIT = 100  # Coarse page pulled from storage before residual filtering
EXPERIENCE_RANGE_MIN = 0
EXPERIENCE_RANGE_MAX = 25  # Default upper bound means "no experience constraint"

# Discovery
MAX_DISCOVERY_QUERIES = 3
DEFAULT_DISCOVERY_MAX_RESULTS = 3  # Result pages per query
DEFAULT_DISCOVERY_WORKERS = 3
DEFAULT_DISCOVERY_RATE_LIMIT = 0.5  # requests per second per endpoint
DEFAULT_DISCOVERY_TIMEOUT = 30.0  # seconds per external call
DEFAULT_SEARCH_DEADLINE = 60.0  # seconds for a whole search call
DISCOVERY_RETRY_ATTEMPTS = 3
DISCOVERY_RETRY_BACKOFF = 1.0  # seconds, doubled per attempt
MAX_DISCOVERED_RECORDS = 8  # Discovered records blended into one result

# Content parsing
MAX_CANDIDATES_PER_BLOCK = 5
MAX_CREDIT_FALLBACK_CANDIDATES = 3
MAX_NAME_LENGTH = 50
MIN_NAME_TOKENS = 2
MAX_NAME_TOKENS = 4
MAX_YEARS_ACTIVE = 25
DEFAULT_YEARS_ACTIVE = 5
EARLIEST_CAREER_YEAR = 1950
DEFAULT_TAG = "Drama"

# Reliability scoring
UNKNOWN_ORIGIN_RELIABILITY = 30
RELIABILITY_WEIGHTS = {
    "source_quality": 0.4,
    "corroboration": 0.3,
    "freshness": 0.2,
    "verification": 0.1,
}

# Origins used by this package when it writes records itself
DISCOVERY_ORIGIN = "web-discovery"
TMDB_ORIGIN = "tmdb"

# API rate limits (requests per second)
TMDB_RATE_LIMIT = 4.0  # TMDb: ~40 req / 10 sec

# Cache TTL (Time To Live) in days
CACHE_TTL_DISCOVERY_PAGES = 7
CACHE_TTL_NEGATIVE_RESULT = 1  # Empty searches are retried sooner

# Parallel processing defaults
DEFAULT_WORKERS = 4
