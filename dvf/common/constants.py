"""Application constants."""

USER_AGENT = "dvf-geo/1.0 (+open-data; contact: configured-email)"
STAGES = (
    "load",
    "geocode",
    "export-communes",
    "export-departements",
    "export-full",
)
DEFAULT_CONCURRENCY = 8
COORDINATE_PRECISION = 6
WGS84_EPSG = 4326
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "vintage",
    "code",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
