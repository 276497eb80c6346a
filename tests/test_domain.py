"""
Tests for the vessel domain (entities and synthetic tracks).
"""

import math

import pytest

from track_replay.domain.track_gen import (
    KNOT_TO_MPS,
    LocalTangentPlane,
    generate_straight_track,
    generate_umbrella_fan,
)
from track_replay.domain.vessels import Vessel, create_vessel, update_vessel, vessel_layer
from track_replay.layers.registry import EntityLayer
from track_replay.shared.protocol import GeoFeature, GeoPoint, Upsert


class TestVessel:
    """Tests for vessel create/update."""

    def test_create_uses_name_property(self):
        vessel = create_vessel(GeoFeature("v0", GeoPoint(1, 2), {"name": "Aurora"}))
        assert vessel.vessel_id == "v0"
        assert vessel.name == "Aurora"
        assert vessel.position is None

    def test_create_defaults_name_to_id(self):
        vessel = create_vessel(GeoFeature("v0", GeoPoint(1, 2)))
        assert vessel.name == "v0"

    def test_update_moves_and_turns(self):
        vessel = Vessel("v0")
        update_vessel(vessel, GeoFeature("v0", GeoPoint(1.5, 2.5), {"heading_deg": 30}))

        assert vessel.position == GeoPoint(1.5, 2.5)
        assert vessel.heading_deg == 30.0
        assert vessel.updates == 1

    def test_update_without_heading_keeps_heading(self):
        vessel = Vessel("v0", heading_deg=45.0)
        update_vessel(vessel, GeoFeature("v0", GeoPoint(1, 2)))
        assert vessel.heading_deg == 45.0

    def test_update_non_point_geometry_keeps_position(self):
        vessel = Vessel("v0", position=GeoPoint(1, 2))
        update_vessel(vessel, GeoFeature("v0", {"type": "LineString", "points": []}))
        assert vessel.position == GeoPoint(1, 2)
        assert vessel.updates == 1

    def test_update_point_mapping_with_extra_keys_moves(self):
        vessel = Vessel("v0", position=GeoPoint(1, 2))
        update_vessel(vessel, GeoFeature("v0", {"lat": 3, "lng": 4.5, "alt": 12}))
        assert vessel.position == GeoPoint(3.0, 4.5)

    def test_update_non_numeric_mapping_keeps_position(self):
        vessel = Vessel("v0", position=GeoPoint(1, 2))
        update_vessel(vessel, GeoFeature("v0", {"lat": "3", "lng": None, "alt": 12}))
        assert vessel.position == GeoPoint(1, 2)

    def test_to_dict(self):
        vessel = Vessel("v0", name="v0", position=GeoPoint(1.0, 2.0), heading_deg=90.0, updates=3)
        assert vessel.to_dict() == {
            "id": "v0",
            "name": "v0",
            "position": {"lat": 1.0, "lng": 2.0},
            "heading_deg": 90.0,
            "updates": 3,
        }

    def test_vessel_layer(self):
        layer = vessel_layer("fleet")
        assert isinstance(layer, EntityLayer)
        assert layer.layer_id == "fleet"
        assert layer.title == "Vessels"

        layer.apply(Upsert(GeoFeature("v0", GeoPoint(1, 2), {"heading_deg": 10})))
        layer.apply(Upsert(GeoFeature("v0", GeoPoint(3, 4), {"heading_deg": 20})))

        vessel = layer.reconciler.get("v0")
        assert len(layer.reconciler) == 1
        assert vessel.position == GeoPoint(3, 4)
        assert vessel.heading_deg == 20.0
        assert vessel.updates == 2


class TestLocalTangentPlane:
    """Tests for LocalTangentPlane."""

    def test_origin_maps_to_itself(self):
        plane = LocalTangentPlane(25.0, 121.0)
        assert plane.to_latlng(0.0, 0.0) == (25.0, 121.0)

    def test_north_offset(self):
        plane = LocalTangentPlane(25.0, 121.0)
        lat, lng = plane.to_latlng(0.0, 111_320.0)
        assert lat == pytest.approx(26.0)
        assert lng == 121.0

    def test_east_offset_scaled_by_latitude(self):
        plane = LocalTangentPlane(60.0, 0.0)
        _, lng = plane.to_latlng(111_320.0 * math.cos(math.radians(60.0)), 0.0)
        assert lng == pytest.approx(1.0)


class TestGenerateStraightTrack:
    """Tests for generate_straight_track."""

    def test_sample_count_and_spacing(self):
        samples = generate_straight_track(25.0, 121.0, heading_deg=0, speed_kn=10, hz=10, minutes=1)

        assert len(samples) == 600
        assert samples[0].t_ms == 0
        assert samples[1].t_ms == pytest.approx(100)
        assert samples[-1].t_ms == pytest.approx(59_900)

    def test_timestamps_ascending(self):
        samples = generate_straight_track(25.0, 121.0, heading_deg=30, speed_kn=5, hz=4, minutes=0.5)
        times = [s.t_ms for s in samples]
        assert times == sorted(times)
        assert len(set(times)) == len(times)

    def test_heading_zero_moves_east(self):
        samples = generate_straight_track(25.0, 121.0, heading_deg=0, speed_kn=10, hz=1, minutes=2)

        assert all(s.lat == 25.0 for s in samples)
        assert samples[-1].lng > samples[0].lng

        # 119 seconds at 10 knots
        expected_m = 119 * 10 * KNOT_TO_MPS
        meters_per_lng = 111_320.0 * math.cos(math.radians(25.0))
        assert (samples[-1].lng - 121.0) * meters_per_lng == pytest.approx(expected_m)

    def test_heading_ninety_moves_north(self):
        samples = generate_straight_track(25.0, 121.0, heading_deg=90, speed_kn=10, hz=1, minutes=1)

        assert samples[-1].lat > samples[0].lat
        assert samples[-1].lng == pytest.approx(121.0)

    def test_heading_carried_on_samples(self):
        samples = generate_straight_track(25.0, 121.0, heading_deg=42, speed_kn=10, hz=1, minutes=0.1)
        assert {s.heading_deg for s in samples} == {42}

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            generate_straight_track(25.0, 121.0, heading_deg=0, speed_kn=10, hz=0)


class TestGenerateUmbrellaFan:
    """Tests for generate_umbrella_fan."""

    @pytest.fixture
    def fan(self):
        return generate_umbrella_fan(25.033, 121.5654, base_heading_deg=90, speed_kn=10, minutes=0.5, hz=2)

    def test_five_tracks(self, fan):
        assert [t.track_id for t in fan] == ["v0", "v1", "v2", "v3", "v4"]
        assert all(len(t.samples) == 60 for t in fan)

    def test_headings_fan_out(self, fan):
        headings = [t.samples[0].heading_deg for t in fan]
        assert headings == [50, 70, 90, 110, 130]

    def test_center_track_starts_at_origin(self, fan):
        first = fan[2].samples[0]
        assert first.lat == pytest.approx(25.033)
        assert first.lng == pytest.approx(121.5654)

    def test_start_points_spaced_sideways(self, fan):
        # Base heading 90 moves north, so the fan spreads east-west
        starts = [t.samples[0] for t in fan]
        lngs = [s.lng for s in starts]
        assert lngs == sorted(lngs, reverse=True)
        assert all(s.lat == pytest.approx(25.033) for s in starts)

        meters_per_lng = 111_320.0 * math.cos(math.radians(25.033))
        gap_m = (lngs[0] - lngs[1]) * meters_per_lng
        assert gap_m == pytest.approx(80.0)
