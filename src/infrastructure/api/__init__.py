"""HTTP side of the data-access layer: the ApiRepository client backend and
the FastAPI resource controller it talks to."""

from .client import ApiRepository, create_http_client
from .router import create_resource_router

__all__ = ["ApiRepository", "create_http_client", "create_resource_router"]
