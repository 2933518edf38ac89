from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("fleet", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DriverZoneState",
            fields=[
                ("driver_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("zone_ids", models.JSONField(default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
