from .backend import BackendPort, QueryPort

__all__ = [
    "BackendPort",
    "QueryPort",
]
