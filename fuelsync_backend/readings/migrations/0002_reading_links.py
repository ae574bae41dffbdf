"""
MIGRATION: ADD NozzleReading.creditor + NozzleReading.settlement
"""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("readings", "0001_initial"),
        ("credits", "0001_initial"),
        ("settlements", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="nozzlereading",
            name="creditor",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="readings",
                to="credits.creditor",
            ),
        ),
        migrations.AddField(
            model_name="nozzlereading",
            name="settlement",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="readings",
                to="settlements.settlement",
            ),
        ),
    ]
