# Vessel domain: entities and synthetic tracks
from .vessels import Vessel, create_vessel, update_vessel, vessel_layer
from .track_gen import LocalTangentPlane, generate_straight_track, generate_umbrella_fan

__all__ = [
    "Vessel",
    "create_vessel",
    "update_vessel",
    "vessel_layer",
    "LocalTangentPlane",
    "generate_straight_track",
    "generate_umbrella_fan",
]
