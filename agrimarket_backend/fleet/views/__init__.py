from .vehicles import VehicleViewSet

__all__ = [
    "VehicleViewSet",
]
