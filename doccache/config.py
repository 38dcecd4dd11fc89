# doccache/config.py
import os

# Cache configuration:
#   CACHE_BACKEND: "mongo" | "memory" | "none"
#   CACHE_CAPACITY: max number of items (memory backend only)
#   CACHE_TTL_SECONDS: TTL applied when a caller passes ttl=None; 0 means no expiration
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "mongo").lower()
CACHE_CAPACITY = int(os.getenv("CACHE_CAPACITY", "10000"))
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "0"))  # 0 = no TTL

# MongoDB backing store. CACHE_NAMESPACE is "<database>.<collection>".
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
CACHE_NAMESPACE = os.getenv("CACHE_NAMESPACE", "cache.entries")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

# Create the expireAt TTL index when the factory builds the mongo backend.
CACHE_ENSURE_TTL_INDEX = os.getenv("CACHE_ENSURE_TTL_INDEX", "true").lower() == "true"
