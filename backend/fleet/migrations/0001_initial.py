import django.db.models.deletion
from django.db import migrations, models

ORDER_STATUSES = [
    ("Unassigned", "Unassigned"),
    ("Assigned", "Assigned"),
    ("At Store", "At Store"),
    ("Picked Up", "Picked Up"),
    ("In Progress", "In Progress"),
    ("Successful", "Successful"),
    ("Failed", "Failed"),
    ("Cancelled", "Cancelled"),
]
ORDER_PRIORITIES = [("Low", "Low"), ("Medium", "Medium"), ("High", "High"), ("Urgent", "Urgent")]
ORDER_TYPES = [("PICKUP", "PICKUP"), ("DELIVERY", "DELIVERY")]
DRIVER_STATUSES = [("On Duty", "On Duty"), ("Available", "Available"), ("Offline", "Offline"), ("Maintenance", "Maintenance")]
VEHICLE_TYPES = [
    ("Car", "Car"),
    ("Motor Cycle", "Motor Cycle"),
    ("Bicycle", "Bicycle"),
    ("Scooter", "Scooter"),
    ("Foot", "Foot"),
    ("Truck", "Truck"),
]
STORE_STATUSES = [("ONLINE", "ONLINE"), ("OFFLINE", "OFFLINE")]
ZONE_TYPES = [("No-go", "No-go"), ("Slow-down", "Slow-down")]
ALERT_TYPES = [
    ("Driver Delayed", "Driver Delayed"),
    ("Order Failed", "Order Failed"),
    ("Low Coverage", "Low Coverage"),
    ("Order Status Updated", "Order Status Updated"),
    ("Entered Exclusion Zone", "Entered Exclusion Zone"),
    ("Challenge Completed", "Challenge Completed"),
]
ALERT_PRIORITIES = [("high", "high"), ("medium", "medium"), ("low", "low")]
ENTITY_TYPES = [
    ("Driver", "Driver"),
    ("Order", "Order"),
    ("Store", "Store"),
    ("Team", "Team"),
    ("Hub", "Hub"),
    ("Challenge", "Challenge"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Geofence",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("coordinates", models.JSONField(default=list)),
                ("color", models.CharField(default="#3B82F6", max_length=16)),
            ],
        ),
        migrations.CreateModel(
            name="ExclusionZone",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("coordinates", models.JSONField(default=list)),
                ("type", models.CharField(choices=ZONE_TYPES, default="Slow-down", max_length=16)),
            ],
        ),
        migrations.CreateModel(
            name="Hub",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("lat", models.FloatField(default=0.0)),
                ("lng", models.FloatField(default=0.0)),
                ("address", models.TextField(blank=True)),
                ("geofence", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="hubs", to="fleet.geofence")),
            ],
        ),
        migrations.CreateModel(
            name="Store",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("lat", models.FloatField()),
                ("lng", models.FloatField()),
                ("address", models.TextField(blank=True)),
                ("manager", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(choices=STORE_STATUSES, default="ONLINE", max_length=20)),
                ("hub", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stores", to="fleet.hub")),
            ],
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("team_lead_id", models.CharField(blank=True, max_length=64, null=True)),
                ("hub", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="teams", to="fleet.hub")),
            ],
        ),
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(choices=VEHICLE_TYPES, default="Car", max_length=20)),
                ("license_plate", models.CharField(blank=True, max_length=32)),
                ("status", models.CharField(default="Active", max_length=20)),
            ],
        ),
        migrations.CreateModel(
            name="Driver",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("lat", models.FloatField(default=0.0)),
                ("lng", models.FloatField(default=0.0)),
                ("address", models.TextField(blank=True)),
                ("status", models.CharField(choices=DRIVER_STATUSES, default="Available", max_length=20)),
                ("points", models.IntegerField(default=0)),
                ("rank", models.IntegerField(default=0)),
                ("vehicle_type", models.CharField(choices=VEHICLE_TYPES, default="Car", max_length=20)),
                ("vehicle_description", models.CharField(blank=True, max_length=255)),
                ("license", models.CharField(blank=True, max_length=64)),
                ("team", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="drivers", to="fleet.team")),
                ("vehicle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="drivers", to="fleet.vehicle")),
            ],
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("customer_name", models.CharField(blank=True, max_length=255)),
                ("customer_phone", models.CharField(blank=True, max_length=32)),
                ("customer_email", models.CharField(blank=True, max_length=255)),
                ("origin_lat", models.FloatField()),
                ("origin_lng", models.FloatField()),
                ("origin_address", models.TextField(blank=True)),
                ("destination_lat", models.FloatField()),
                ("destination_lng", models.FloatField()),
                ("destination_address", models.TextField(blank=True)),
                ("status", models.CharField(choices=ORDER_STATUSES, default="Unassigned", max_length=20)),
                ("priority", models.CharField(choices=ORDER_PRIORITIES, default="Medium", max_length=10)),
                ("order_type", models.CharField(choices=ORDER_TYPES, default="DELIVERY", max_length=10)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                ("driver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="fleet.driver")),
                ("store", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="fleet.store")),
                ("team", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="fleet.team")),
                ("vehicle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="fleet.vehicle")),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="fleet.order")),
            ],
        ),
        migrations.CreateModel(
            name="ActivityLogEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField()),
                ("status", models.CharField(choices=ORDER_STATUSES, max_length=20)),
                ("timestamp", models.DateTimeField()),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="activity", to="fleet.order")),
            ],
            options={"ordering": ["position"]},
        ),
        migrations.AddConstraint(
            model_name="activitylogentry",
            constraint=models.UniqueConstraint(fields=("order", "position"), name="unique_activity_position"),
        ),
        migrations.CreateModel(
            name="Alert",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=ALERT_TYPES, max_length=32)),
                ("message", models.TextField()),
                ("priority", models.CharField(choices=ALERT_PRIORITIES, default="medium", max_length=10)),
                ("related_entity_type", models.CharField(blank=True, choices=ENTITY_TYPES, max_length=20, null=True)),
                ("related_entity_id", models.CharField(blank=True, max_length=64, null=True)),
                ("timestamp", models.DateTimeField()),
                ("is_read", models.BooleanField(default=False)),
            ],
            options={"ordering": ["-timestamp"]},
        ),
        migrations.CreateModel(
            name="TookanIdMapping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("order", "Order (job_id)"), ("driver", "Driver (fleet_id)"), ("team", "Team (team_id)")], max_length=10)),
                ("internal_id", models.CharField(max_length=64)),
            ],
        ),
        migrations.AddConstraint(
            model_name="tookanidmapping",
            constraint=models.UniqueConstraint(fields=("kind", "internal_id"), name="unique_tookan_internal_id"),
        ),
    ]
