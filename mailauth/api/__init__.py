"""API package for the application."""
from .dependencies import get_resolver, get_store, get_actor_id
from .errors import register_exception_handlers

__all__ = [
    "get_resolver",
    "get_store",
    "get_actor_id",
    "register_exception_handlers"
]
