"""
PATH: users/models/__init__.py

Users models export surface.
"""

from .profiles import AdminProfile, DistributorProfile, FarmerProfile, TransporterProfile
from .user import User

__all__ = [
    "User",
    "FarmerProfile",
    "DistributorProfile",
    "TransporterProfile",
    "AdminProfile",
]
