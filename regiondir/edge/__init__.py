from .app import create_app
from .routing import PASSTHROUGH, REWRITE, RouteDecision, decide_route

__all__ = ["create_app", "decide_route", "RouteDecision", "PASSTHROUGH", "REWRITE"]
