from .connection import InMemoryConnection

__all__ = [
    "InMemoryConnection",
]
