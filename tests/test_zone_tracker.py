import pytest

from alerts import AlertEmitter, AlertPriority, AlertType, InMemoryAlertSink, RelatedEntityType
from geofencing import InMemoryZoneStateStore, ZoneEntryTracker

INSIDE_CBD = (-26.095, 28.065)
INSIDE_BOTH = (-26.105, 28.05)
OUTSIDE = (-26.2485, 27.8540)


@pytest.fixture
def tracker(alert_sink):
    return ZoneEntryTracker(AlertEmitter(alert_sink, asynchronous=False))


def test_one_alert_per_entry(tracker, alert_sink, exclusion_zones):
    """
    Staying inside a zone across several updates produces a single alert.
    """
    first = tracker.observe("D001", INSIDE_CBD, exclusion_zones, driver_name="Thabo Nkosi")
    second = tracker.observe("D001", INSIDE_CBD, exclusion_zones, driver_name="Thabo Nkosi")
    third = tracker.observe("D001", (-26.096, 28.066), exclusion_zones, driver_name="Thabo Nkosi")

    assert [zone.id for zone in first] == ["Z001"]
    assert second == []
    assert third == []

    alerts = alert_sink.alerts
    assert len(alerts) == 1
    assert alerts[0].type == AlertType.ENTERED_EXCLUSION_ZONE
    assert alerts[0].message == "Driver Thabo Nkosi entered zone 'Sandton CBD'."
    assert alerts[0].priority == AlertPriority.HIGH
    assert alerts[0].related_entity_type == RelatedEntityType.DRIVER
    assert alerts[0].related_entity_id == "D001"


def test_leaving_rearms_the_zone(tracker, alert_sink, exclusion_zones):
    tracker.observe("D001", INSIDE_CBD, exclusion_zones)
    tracker.observe("D001", OUTSIDE, exclusion_zones)
    entered = tracker.observe("D001", INSIDE_CBD, exclusion_zones)

    assert [zone.id for zone in entered] == ["Z001"]
    assert len(alert_sink.alerts) == 2


def test_overlapping_zones_alert_separately(tracker, alert_sink, exclusion_zones):
    """
    Entering two overlapping zones at once fires one alert per zone;
    moving into the second one later only alerts for that one.
    """
    tracker.observe("D001", INSIDE_CBD, exclusion_zones)
    entered = tracker.observe("D001", INSIDE_BOTH, exclusion_zones)

    assert [zone.id for zone in entered] == ["Z002"]
    priorities = [alert.priority for alert in alert_sink.alerts]
    assert priorities == [AlertPriority.HIGH, AlertPriority.MEDIUM]
    assert tracker.zones_containing("D001") == {"Z001", "Z002"}


def test_drivers_are_tracked_independently(tracker, alert_sink, exclusion_zones):
    tracker.observe("D001", INSIDE_CBD, exclusion_zones)
    tracker.observe("D003", INSIDE_CBD, exclusion_zones)

    assert [alert.related_entity_id for alert in alert_sink.alerts] == ["D001", "D003"]


def test_forget_resets_state(tracker, alert_sink, exclusion_zones):
    tracker.observe("D001", INSIDE_CBD, exclusion_zones)
    tracker.forget("D001")

    assert tracker.zones_containing("D001") == set()
    assert [zone.id for zone in tracker.observe("D001", INSIDE_CBD, exclusion_zones)] == ["Z001"]


def test_shared_state_debounces_across_trackers(alert_sink, exclusion_zones):
    """
    Two trackers (two worker processes) on the same state store still
    alert once for a driver who stays inside.
    """
    state = InMemoryZoneStateStore()
    first = ZoneEntryTracker(AlertEmitter(alert_sink, asynchronous=False), state)
    second = ZoneEntryTracker(AlertEmitter(alert_sink, asynchronous=False), state)

    first.observe("D001", INSIDE_CBD, exclusion_zones)
    entered = second.observe("D001", INSIDE_CBD, exclusion_zones)

    assert entered == []
    assert len(alert_sink.alerts) == 1
    assert second.zones_containing("D001") == {"Z001"}
