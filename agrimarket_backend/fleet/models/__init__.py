from .vehicle import Vehicle

__all__ = [
    "Vehicle",
]
