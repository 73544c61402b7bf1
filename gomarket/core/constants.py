"""Cart-wide constants and configuration defaults.

Centralizes storage keys and backend names so the manager, the stores and
the settings loader agree on them.
"""

# ============== STORAGE ==============
CART_STORAGE_KEY = "@GoMarketPlace:products"
DEFAULT_CART_STORAGE_PATH = "data/storage/cart.json"

STORAGE_BACKEND_MEMORY = "memory"
STORAGE_BACKEND_FILE = "file"
STORAGE_BACKEND_REDIS = "redis"
STORAGE_BACKENDS = frozenset(
    {STORAGE_BACKEND_MEMORY, STORAGE_BACKEND_FILE, STORAGE_BACKEND_REDIS}
)
DEFAULT_STORAGE_BACKEND = STORAGE_BACKEND_FILE

# ============== LOGGING ==============
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
