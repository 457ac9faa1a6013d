"""Internal constants shared across the library."""

BASE_URL = "https://everywhere-hub.com"
TRACKS_ENDPOINT = "/v2/api/tracks"
USER_AGENT = "pyeverywhere"

#: Namespace used for device keys (``"inreach-<entityId>"``).
DEFAULT_KEY_PREFIX = "inreach"

#: Minimum time between bulk pulls (5 minutes).
DEFAULT_CACHE_REFRESH_MS = 300_000

#: Maximum age of a cached position before eviction (60 minutes).
DEFAULT_RETENTION_DURATION_MS = 3_600_000

DEFAULT_REQUEST_TIMEOUT = 30.0

#: Placeholder for sources that do not report a device id (bulk pull).
UNKNOWN_DEVICE_ID = "UNKNOWN"

TIME_BOUND_EPOCH = "epoch"
TIME_BOUND_ISO = "iso"
TIME_BOUND_FORMATS: frozenset[str] = frozenset({TIME_BOUND_EPOCH, TIME_BOUND_ISO})
