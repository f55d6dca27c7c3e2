"""
Fixed constants shared by the sync, verification and reset services.

Seed fixtures describe the example records older installations shipped with.
They are only consulted when pruning default data.
"""

# PostgREST error code for "JSON object requested, multiple (or no) rows returned"
POSTGREST_NO_ROWS_CODE = "PGRST116"

# Prefix for the local storage key of each domain collection
LOCAL_COLLECTION_KEY_PREFIX = "ledger_"

# Substrings that identify domain data in the local store ("liability" is not
# a substring of the ledger_liabilities collection key)
DOMAIN_KEY_SUBSTRINGS = ("transaction", "asset", "liability", "liabilities", "account")

# Keys owned by the platform; a reset must never remove them
RESERVED_KEY_PREFIXES = ("system_", "platform_")
RESERVED_KEYS = frozenset({"installation_id", "device_id"})

# Seed data shipped by earlier releases
SEED_ASSET_IDS = frozenset({"1", "2", "3"})
SEED_ASSET_NAMES = frozenset({"現金", "銀行", "房地產"})

SEED_ACCOUNT_IDS = frozenset({"1", "2"})
SEED_ACCOUNT_NAMES = frozenset({"現金", "銀行"})

# (description or category, amount)
SEED_TRANSACTIONS = (
    ("餐飲", 5000),
    ("薪水", 30000),
)

# Liabilities never shipped as seeds, but sample ones were labelled like this
SEED_LIABILITY_NAME_MARKERS = ("預設", "示例")

# Explicit marker for seed records created by newer releases
SEED_DATA_FLAG = "is_seed_data"
