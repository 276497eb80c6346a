"""
Replay wire protocol: events and entity deltas.

A ReplayEvent addresses one delta to one layer. Deltas are one of
Upsert, Remove or Clear and have a plain-dict wire shape:

    {"type": "upsert", "feature": {"id": ..., "geometry": {...}, "properties": {...}}}
    {"type": "remove", "id": ...}
    {"type": "clear"}
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 point in degrees."""
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class GeoFeature:
    """An identified geometry with optional properties."""
    id: str
    geometry: Any
    properties: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        geometry = self.geometry.to_dict() if hasattr(self.geometry, "to_dict") else self.geometry
        data = {"id": self.id, "geometry": geometry}
        if self.properties:
            data["properties"] = dict(self.properties)
        return data


@dataclass(frozen=True)
class Upsert:
    feature: GeoFeature


@dataclass(frozen=True)
class Remove:
    id: str


@dataclass(frozen=True)
class Clear:
    pass


Delta = Union[Upsert, Remove, Clear]


@dataclass(frozen=True)
class ReplayEvent:
    """A delta addressed to a layer."""
    layer_id: str
    delta: Delta


def _geometry_from_dict(geometry: Any) -> Any:
    if isinstance(geometry, dict) and set(geometry) == {"lat", "lng"}:
        try:
            return GeoPoint(float(geometry["lat"]), float(geometry["lng"]))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid point geometry: {geometry!r}") from e
    return geometry


def feature_from_dict(data: dict) -> GeoFeature:
    """Build a GeoFeature from its wire shape."""
    if not isinstance(data, dict) or "id" not in data or "geometry" not in data:
        raise ValueError(f"Invalid feature: {data!r}")

    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ValueError(f"Feature properties must be a mapping, got {type(properties).__name__}")

    return GeoFeature(
        id=str(data["id"]),
        geometry=_geometry_from_dict(data["geometry"]),
        properties=dict(properties),
    )


def delta_from_dict(data: dict) -> Delta:
    """
    Parse a delta from its wire shape.

    Raises:
        ValueError: unknown type or missing fields
    """
    if not isinstance(data, dict):
        raise ValueError(f"Delta must be a mapping, got {type(data).__name__}")

    delta_type = data.get("type")

    if delta_type == "upsert":
        if "feature" not in data:
            raise ValueError("Upsert delta requires a feature")
        return Upsert(feature_from_dict(data["feature"]))

    if delta_type == "remove":
        if "id" not in data:
            raise ValueError("Remove delta requires an id")
        return Remove(str(data["id"]))

    if delta_type == "clear":
        return Clear()

    raise ValueError(f"Unknown delta type: {delta_type!r}")


def delta_to_dict(delta: Delta) -> dict:
    """Convert a delta to its wire shape."""
    if isinstance(delta, Upsert):
        return {"type": "upsert", "feature": delta.feature.to_dict()}
    if isinstance(delta, Remove):
        return {"type": "remove", "id": delta.id}
    if isinstance(delta, Clear):
        return {"type": "clear"}
    raise ValueError(f"Not a delta: {delta!r}")


def event_to_dict(event: ReplayEvent) -> dict:
    return {"layer_id": event.layer_id, "delta": delta_to_dict(event.delta)}
