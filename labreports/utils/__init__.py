from .cors import init_cors

__all__ = [
    "init_cors",
]
