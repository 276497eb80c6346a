"""
Vessel entities for replay layers.

Supplies the create/update pair an EntityReconciler needs to keep live
vessel state (position, heading) from upsert deltas.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Optional

from track_replay.layers.reconciler import EntityReconciler
from track_replay.layers.registry import EntityLayer
from track_replay.shared.protocol import GeoFeature, GeoPoint


@dataclass
class Vessel:
    """Live state of one replayed vessel."""
    vessel_id: str
    name: str = ""
    position: Optional[GeoPoint] = None
    heading_deg: Optional[float] = None  # Degrees, as carried by the track
    updates: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.vessel_id,
            "name": self.name,
            "position": self.position.to_dict() if self.position else None,
            "heading_deg": self.heading_deg,
            "updates": self.updates,
        }


def create_vessel(feature: GeoFeature) -> Vessel:
    return Vessel(vessel_id=feature.id, name=feature.properties.get("name", feature.id))


def _position_of(geometry: Any) -> Optional[GeoPoint]:
    if isinstance(geometry, GeoPoint):
        return geometry
    if isinstance(geometry, dict):
        lat, lng = geometry.get("lat"), geometry.get("lng")
        if all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in (lat, lng)):
            return GeoPoint(float(lat), float(lng))
    return None


def update_vessel(vessel: Vessel, feature: GeoFeature):
    """Move the vessel when the geometry carries numeric lat/lng."""
    position = _position_of(feature.geometry)
    if position is not None:
        vessel.position = position

    heading = feature.properties.get("heading_deg")
    if heading is not None:
        vessel.heading_deg = float(heading)

    name = feature.properties.get("name")
    if name:
        vessel.name = name

    vessel.updates += 1


def vessel_layer(layer_id: str = "vessels", title: Optional[str] = None) -> EntityLayer:
    """Build a replay-capable layer of vessels."""
    return EntityLayer(
        layer_id,
        EntityReconciler(create_vessel, update_vessel),
        title=title or "Vessels",
    )
