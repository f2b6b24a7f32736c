"""Internal constants shared across the library."""

BASE_URL = "http://localhost:3000"
API_PATH = "/api"
TOKENS_ENDPOINT = "/tokens"
USER_AGENT = "tokenview/0.1"

#: Number of records requested per bulk fetch.
FETCH_LIMIT = 100
#: Soft upper bound on the number of records held by the store.
MAX_TOKENS = 100
#: Records per display page.
PAGE_SIZE = 25

# ------------------------------------------------------------------
# Push-channel event names
# ------------------------------------------------------------------

EVENT_INITIAL_DATA = "initial_data"
EVENT_TOKENS_UPDATED = "tokens_updated"
EVENT_PRICE_UPDATE = "price_update"
EVENT_VOLUME_SPIKE = "volume_spike"
EVENT_NEW_TOKEN = "new_token"

STREAM_EVENTS: tuple[str, ...] = (
    EVENT_INITIAL_DATA,
    EVENT_TOKENS_UPDATED,
    EVENT_PRICE_UPDATE,
    EVENT_VOLUME_SPIKE,
    EVENT_NEW_TOKEN,
)
