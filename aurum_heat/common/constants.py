"""Application constants."""

USER_AGENT = "aurum-heat/0.3 (+telemetry collector)"
DEFAULT_BASE_URL = "https://mijnaurum.nl"
AUTH_PATH = "/user/v2/authentication"
USERS_PATH = "/user/v2/users"
AUTH_TOKEN_HEADER = "Auth-Token"
METRIC_NAME = "heat usage"
DESCRIPTION = "Gathers Heat usage metrics from MijnAurum.nl V2 REST API"
ENV_USERNAME = "AURUM_USERNAME"
ENV_PASSWORD = "AURUM_PASSWORD"
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "cycle_id",
    "stage",
    "event",
    "status",
    "duration_ms",
    "records_in",
    "metrics_out",
    "error_code",
    "message",
)
