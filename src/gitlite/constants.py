"""Constants used throughout GitLite."""

# Directory names
GITLITE_DIR = ".gitLite"
OBJECTS_DIR = "objects"

# File names
INDEX_FILE = "index"
HEAD_FILE = "HEAD"
IGNORE_FILE = ".gitignore"

# Hash algorithm
HASH_ALGORITHM = "sha1"
HASH_LENGTH = 40  # SHA-1 produces 40 hex characters
MIN_PREFIX_LENGTH = 4

# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_DATA_ERROR = 3
