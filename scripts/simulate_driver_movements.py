import argparse
import csv
import logging
import random

from alerts import AlertType, InMemoryAlertSink
from common.geo import Location
from dispatch.container import build_in_memory_services
from drivers.models import Driver
from geofencing.models import ExclusionZone, ZoneType

logger = logging.getLogger("simulate_driver_movements")

# Johannesburg: drivers start around Sandton and drift south towards Soweto
BASE_LAT = -26.1076
BASE_LNG = 28.0567

ZONES = [
    ExclusionZone("Z001", "Sandton CBD", [(-26.09, 28.04), (-26.09, 28.07), (-26.12, 28.07), (-26.12, 28.04)],
                  zone_type=ZoneType.NO_GO),
    ExclusionZone("Z002", "M1 Roadworks", [(-26.15, 28.02), (-26.15, 28.05), (-26.19, 28.05), (-26.19, 28.02)],
                  zone_type=ZoneType.SLOW_DOWN),
]


def simulate_driver_movements(filename="driver_movements.csv", count=20, steps=30, seed=None):
    rng = random.Random(seed)
    sink = InMemoryAlertSink()

    drivers = [
        Driver.new(
            f"D{str(i + 1).zfill(3)}",
            f"Driver {i + 1}",
            BASE_LAT + (rng.random() - 0.5) * 0.08,
            BASE_LNG + (rng.random() - 0.5) * 0.08,
        )
        for i in range(count)
    ]
    services = build_in_memory_services(drivers=drivers, exclusion_zones=ZONES, alert_sink=sink)

    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["step", "driver_id", "lat", "lng", "entered_zones"])

        for step in range(steps):
            for driver in services.drivers.list():
                # mostly southbound drift with some jitter (~300m per step)
                lat = driver.location.lat - rng.random() * 0.004
                lng = driver.location.lng + (rng.random() - 0.5) * 0.004

                result = services.locations.update_location(driver.id, Location(lat, lng))
                entered = ";".join(zone.name for zone in result.entered_zones)
                writer.writerow([step, driver.id, round(lat, 6), round(lng, 6), entered])

    services.emitter.drain()
    services.close()

    zone_alerts = [alert for alert in sink.alerts if alert.type == AlertType.ENTERED_EXCLUSION_ZONE]
    for alert in zone_alerts:
        logger.info("[%s] %s", alert.priority.value, alert.message)

    logger.info("Simulated %d drivers over %d steps into '%s': %d zone entries.",
                count, steps, filename, len(zone_alerts))
    return zone_alerts


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Move mock drivers through exclusion zones")
    parser.add_argument("--output", default="driver_movements.csv")
    parser.add_argument("--drivers", type=int, default=20)
    parser.add_argument("--steps", type=int, default=30)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    simulate_driver_movements(args.output, args.drivers, args.steps, args.seed)
