"""Default values applied when configuration omits a setting."""

DEFAULT_QUALITY = 95
DEFAULT_FORMAT = "png"

DEFAULT_SHARD_WIDTH = 1
DEFAULT_SHARD_DEPTH = 2

DEFAULT_CACHE_MAX_ENTRIES = 1000

DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379
DEFAULT_REDIS_CONNECT_TIMEOUT = 5.0

DEFAULT_S3_ACL = "public-read"
