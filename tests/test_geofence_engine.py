import pytest

from common.errors import ValidationError
from common.geo import Location
from drivers.models import Driver
from geofencing import (
    ExclusionZone,
    Geofence,
    ZoneType,
    check_point,
    contains,
    drivers_inside_zones,
    polygon_area_km2,
)


@pytest.fixture
def rosebank():
    return [(-26.140, 28.035), (-26.140, 28.050), (-26.150, 28.050), (-26.150, 28.035)]


def test_point_inside_sandton_cbd(sandton_cbd):
    """
    A point in the middle of the Sandton CBD rectangle is inside,
    a point in Soweto is not.
    """
    assert contains(sandton_cbd, (-26.10, 28.05)) is True
    assert contains(sandton_cbd, Location(-26.105, 28.055)) is True
    assert contains(sandton_cbd, (-26.2485, 27.8540)) is False


def test_contains_is_deterministic(sandton_cbd):
    point = (-26.1076, 28.0567)
    answers = {contains(sandton_cbd, point) for _ in range(50)}
    assert answers == {True}


def test_contains_ignores_vertex_winding(sandton_cbd):
    reversed_polygon = list(reversed(sandton_cbd))
    for point in [(-26.10, 28.05), (-26.13, 28.05), (-26.10, 28.08)]:
        assert contains(sandton_cbd, point) == contains(reversed_polygon, point)


def test_concave_polygon():
    """
    L-shaped polygon: the notch must be reported as outside.
    """
    l_shape = [(0, 0), (0, 4), (2, 4), (2, 2), (4, 2), (4, 0)]

    assert contains(l_shape, (1, 1)) is True
    assert contains(l_shape, (1, 3)) is True
    assert contains(l_shape, (3, 1)) is True
    assert contains(l_shape, (3, 3)) is False


def test_boundary_follows_half_open_rule():
    """
    South and west edges count as inside, north and east edges as outside.
    """
    square = [(0, 0), (0, 10), (10, 10), (10, 0)]

    assert contains(square, (0, 5)) is True     # south edge
    assert contains(square, (5, 0)) is True     # west edge
    assert contains(square, (10, 5)) is False   # north edge
    assert contains(square, (5, 10)) is False   # east edge


def test_degenerate_polygon_contains_nothing():
    assert contains([(0, 0), (1, 1)], (0.5, 0.5)) is False


def test_check_point_reports_every_overlapping_zone(sandton_cbd, rosebank):
    overlapping = [(-26.10, 28.05), (-26.10, 28.06), (-26.11, 28.06), (-26.11, 28.05)]
    zones = [
        ExclusionZone("Z1", "Sandton CBD", sandton_cbd, zone_type=ZoneType.NO_GO),
        ExclusionZone("Z2", "Rosebank", rosebank, zone_type=ZoneType.SLOW_DOWN),
        ExclusionZone("Z3", "Nelson Mandela Square", overlapping, zone_type=ZoneType.SLOW_DOWN),
    ]

    result = check_point((-26.105, 28.055), zones)

    assert result.is_inside is True
    assert [zone.id for zone in result.matches] == ["Z1", "Z3"]


def test_check_point_outside_everything(sandton_cbd, rosebank):
    zones = [Geofence("G1", "Sandton", sandton_cbd), Geofence("G2", "Rosebank", rosebank)]

    result = check_point((-26.2485, 27.8540), zones)

    assert result.is_inside is False
    assert result.matches == []


def test_check_point_filters_by_zone_type(sandton_cbd):
    zones = [
        ExclusionZone("Z1", "CBD no-go", sandton_cbd, zone_type=ZoneType.NO_GO),
        ExclusionZone("Z2", "CBD slow", sandton_cbd, zone_type=ZoneType.SLOW_DOWN),
        Geofence("G1", "Sandton hub", sandton_cbd),
    ]

    result = check_point((-26.10, 28.05), zones, zone_type=ZoneType.NO_GO)

    assert [zone.id for zone in result.matches] == ["Z1"]


def test_zone_requires_three_vertices():
    with pytest.raises(ValidationError):
        Geofence("G1", "Line", [(0, 0), (1, 1)])


def test_zone_accepts_coordinate_dicts():
    zone = ExclusionZone(
        "Z1",
        "Dict zone",
        [{"lat": 0, "lng": 0}, {"lat": 0, "lng": 1}, {"lat": 1, "lng": 1}],
        zone_type="No-go",
    )

    assert zone.zone_type == ZoneType.NO_GO
    assert zone.vertices == ((0.0, 0.0), (0.0, 1.0), (1.0, 1.0))
    assert zone.coordinates()[1] == {"lat": 0.0, "lng": 1.0}


def test_unknown_zone_type_is_rejected(sandton_cbd):
    with pytest.raises(ValidationError):
        ExclusionZone("Z1", "Bad", sandton_cbd, zone_type="Speed-trap")


def test_drivers_inside_zones(sandton_cbd):
    zones = [Geofence("G1", "Sandton", sandton_cbd)]
    inside = Driver.new("D001", "Thabo", -26.10, 28.05)
    outside = Driver.new("D002", "Lerato", -26.24, 27.86)

    pairs = drivers_inside_zones([inside, outside], zones)

    assert [(driver.id, zone.id) for driver, zone in pairs] == [("D001", "G1")]


def test_polygon_area_of_sandton_cbd(sandton_cbd):
    """
    0.03 x 0.03 degrees at ~26S is roughly 3.34 km x 3.0 km.
    """
    area = polygon_area_km2(sandton_cbd)
    assert area == pytest.approx(10.0, rel=0.05)


def test_polygon_area_degenerate():
    assert polygon_area_km2([(0, 0), (1, 1)]) == 0.0
