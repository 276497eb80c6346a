"""
Synthetic vessel tracks for demos and tests.

Tracks are straight lines at constant speed and heading, sampled at a
fixed rate, converted to lat/lng with a local tangent plane approximation
around the start point.
"""

import math

import numpy as np

from track_replay.replay.source import Sample, Track

KNOT_TO_MPS = 0.514444

# Fan layout: heading offsets and lateral slots, left to right
FAN_HEADING_OFFSETS = (-40, -20, 0, 20, 40)
FAN_LATERAL_SLOTS = (-2, -1, 0, 1, 2)


class LocalTangentPlane:
    """
    Converts metre offsets (east, north) around an origin to lat/lng.

    Accurate enough for tracks of a few kilometres.
    """

    METERS_PER_DEG_LAT = 111_320.0

    def __init__(self, origin_lat: float, origin_lng: float):
        self.origin_lat = origin_lat
        self.origin_lng = origin_lng
        self.meters_per_lat = self.METERS_PER_DEG_LAT
        self.meters_per_lng = self.METERS_PER_DEG_LAT * math.cos(math.radians(origin_lat))

    def to_latlng(self, east, north):
        """Works on scalars or numpy arrays."""
        lat = self.origin_lat + north / self.meters_per_lat
        lng = self.origin_lng + east / self.meters_per_lng
        return lat, lng


def generate_straight_track(
    start_lat: float,
    start_lng: float,
    heading_deg: float,
    speed_kn: float,
    hz: float = 10,
    minutes: float = 10,
) -> list[Sample]:
    """
    Sample a straight track.

    Heading is measured from east towards north: the east velocity is
    cos(heading) and the north velocity sin(heading).

    Args:
        start_lat: Start latitude in degrees
        start_lng: Start longitude in degrees
        heading_deg: Direction of travel in degrees
        speed_kn: Speed in knots
        hz: Samples per second
        minutes: Track duration

    Returns:
        Samples ascending by t_ms, starting at 0
    """
    if hz <= 0:
        raise ValueError(f"hz must be positive, got {hz}")

    dt_ms = 1000.0 / hz
    total = int(minutes * 60 * hz)

    mps = speed_kn * KNOT_TO_MPS
    rad = math.radians(heading_deg)
    v_east = math.cos(rad) * mps
    v_north = math.sin(rad) * mps

    t_ms = np.arange(total, dtype=float) * dt_ms
    t_sec = t_ms / 1000.0

    plane = LocalTangentPlane(start_lat, start_lng)
    lats, lngs = plane.to_latlng(v_east * t_sec, v_north * t_sec)

    return [
        Sample(t_ms=float(t), lat=float(lat), lng=float(lng), heading_deg=heading_deg)
        for t, lat, lng in zip(t_ms, lats, lngs)
    ]


def generate_umbrella_fan(
    origin_lat: float,
    origin_lng: float,
    base_heading_deg: float,
    speed_kn: float,
    minutes: float = 10,
    hz: float = 10,
    lateral_spacing_m: float = 80.0,
) -> list[Track]:
    """
    Five vessels fanning out around a base heading.

    All move at the same speed; start points are offset sideways so the
    tracks do not overlap. Track ids are v0..v4, left to right.
    """
    plane = LocalTangentPlane(origin_lat, origin_lng)

    base_rad = math.radians(base_heading_deg)
    # Unit vector perpendicular to the base direction
    right_east = -math.sin(base_rad)
    right_north = math.cos(base_rad)

    tracks = []
    for i, (heading_offset, slot) in enumerate(zip(FAN_HEADING_OFFSETS, FAN_LATERAL_SLOTS)):
        offset = slot * lateral_spacing_m
        start_lat, start_lng = plane.to_latlng(right_east * offset, right_north * offset)

        tracks.append(Track(
            track_id=f"v{i}",
            samples=generate_straight_track(
                start_lat=start_lat,
                start_lng=start_lng,
                heading_deg=base_heading_deg + heading_offset,
                speed_kn=speed_kn,
                hz=hz,
                minutes=minutes,
            ),
        ))

    return tracks
