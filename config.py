"""Application configuration driven by environment variables.

All settings have sensible defaults for local development.
"""

import os

# ---------------------------------------------------------------------------
# Recommender gRPC server
# ---------------------------------------------------------------------------

GRPC_SERVER_HOST: str = os.getenv("GRPC_SERVER_HOST", "0.0.0.0")
GRPC_SERVER_PORT: int = int(os.getenv("GRPC_SERVER_PORT", "50051"))

# Thread pool size for the gRPC server.  Each concurrent RPC occupies one
# thread, so this caps concurrent request handling.
GRPC_MAX_WORKERS: int = int(os.getenv("GRPC_MAX_WORKERS", "10"))

# ---------------------------------------------------------------------------
# HTTP gateway (web clients connect here; it calls the gRPC server)
# ---------------------------------------------------------------------------

HTTP_HOST: str = os.getenv("HTTP_HOST", "0.0.0.0")
HTTP_PORT: int = int(os.getenv("HTTP_PORT", "8080"))
RECOMMENDER_ADDRESS: str = os.getenv("RECOMMENDER_ADDRESS", "localhost:50051")
RPC_TIMEOUT_SECONDS: float = float(os.getenv("RPC_TIMEOUT_SECONDS", "3.0"))

# ---------------------------------------------------------------------------
# Recommendation engine
# ---------------------------------------------------------------------------

DEFAULT_RECOMMENDATION_LIMIT: int = int(os.getenv("DEFAULT_RECOMMENDATION_LIMIT", "20"))
MAX_RECOMMENDATION_LIMIT: int = int(os.getenv("MAX_RECOMMENDATION_LIMIT", "100"))

# Recently viewed coffees kept per user
RECENTLY_VIEWED_LIMIT: int = int(os.getenv("RECENTLY_VIEWED_LIMIT", "20"))

# ---------------------------------------------------------------------------
# Coffee catalogue snapshot
# ---------------------------------------------------------------------------

CATALOGUE_PATH: str = os.getenv(
    "CATALOGUE_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sample_catalogue.json"),
)

# How often (seconds) to reload the catalogue snapshot.
CATALOGUE_REFRESH_INTERVAL_SECONDS: int = int(
    os.getenv("CATALOGUE_REFRESH_INTERVAL_SECONDS", "300")
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
