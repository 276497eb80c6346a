from .protocol import (
    GeoPoint,
    GeoFeature,
    Upsert,
    Remove,
    Clear,
    Delta,
    ReplayEvent,
    delta_from_dict,
    delta_to_dict,
    event_to_dict,
    feature_from_dict,
)

__all__ = [
    "GeoPoint",
    "GeoFeature",
    "Upsert",
    "Remove",
    "Clear",
    "Delta",
    "ReplayEvent",
    "delta_from_dict",
    "delta_to_dict",
    "event_to_dict",
    "feature_from_dict",
]
