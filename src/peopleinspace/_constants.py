"""Internal constants shared across the library."""

BASE_URL = "http://api.open-notify.org"
USER_AGENT = "peopleinspace-python"

PEOPLE_ENDPOINT = "/astros.json"
POSITION_ENDPOINT = "/iss-now.json"

DEFAULT_DATABASE_PATH = "peopleinspace.db"
DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_MAX_BACKOFF: float = 15 * 60

#: Version stored in ``PRAGMA user_version`` of the local database.
SCHEMA_VERSION = 1
