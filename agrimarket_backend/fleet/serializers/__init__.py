from .vehicle import VehicleSerializer, VehicleStatusSerializer

__all__ = [
    "VehicleSerializer",
    "VehicleStatusSerializer",
]
