"""
MIGRATION: ADD User.station (assigned station for managers/employees)
"""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("users", "0001_initial"),
        ("stations", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="station",
            field=models.ForeignKey(
                blank=True,
                help_text="Assigned station (managers and employees)",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="staff",
                to="stations.station",
            ),
        ),
    ]
