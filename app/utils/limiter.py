from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import ServerConfig


def create_limiter(server: ServerConfig) -> Limiter:
    """Rate limiter for one app instance (limit by IP); every upload costs a model call."""
    return Limiter(key_func=get_remote_address, enabled=server.rate_limit_enabled)
