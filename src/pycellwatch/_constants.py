"""Internal constants shared across the library."""

#: Seconds between two poll cycles. Fixed; not exposed through configuration.
POLL_INTERVAL_SECONDS: float = 3.0

#: Request code used to correlate a permission prompt with its result.
REQUEST_PERMISSION_CODE: int = 100

#: Value the platform reports for integer identity fields it does not know
#: (``Integer.MAX_VALUE`` on Android).
CELL_INFO_UNAVAILABLE: int = 2_147_483_647

DEFAULT_QUERY_TIMEOUT: float = 10.0

TERMUX_CELLINFO_COMMAND = "termux-telephony-cellinfo"
TERMUX_LOCATION_COMMAND = "termux-location"

HTTP_CELLINFO_PATH = "/cellinfo"
HTTP_LOCATION_PATH = "/location"
