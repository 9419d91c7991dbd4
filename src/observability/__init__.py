# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_playlist_created,
    record_playlist_generated,
    record_token_refresh,
    record_upstream_error,
)
from .tracing import init_tracing, span  # noqa: F401
