"""API endpoints."""

from relayer.api.cors import cors_headers, install_cors
from relayer.api.routes import StatusResponse, router

__all__ = [
    "router",
    "StatusResponse",
    "install_cors",
    "cors_headers",
]
