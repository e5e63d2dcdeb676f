"""Route request building, directions clients and plan interpretation."""

from .interpreter import RoutePlanner, summarize_legs
from .request_builder import build_route_request
from .service import DriverSession, get_directions_client

__all__ = [
    "DriverSession",
    "RoutePlanner",
    "build_route_request",
    "get_directions_client",
    "summarize_legs",
]
