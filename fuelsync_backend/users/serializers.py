from rest_framework import serializers
from django.contrib.auth import get_user_model

from core.policies import PlanLimits
from permissions.roles import capabilities_for

User = get_user_model()


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    station_id = serializers.UUIDField(read_only=True, allow_null=True)
    plan = serializers.SerializerMethodField()
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "station_id",
            "plan",
            "capabilities",
        ]

    def get_capabilities(self, obj) -> list:
        return sorted(capabilities_for(obj))

    def get_plan(self, obj) -> dict:
        limits = PlanLimits.defaults()
        if obj.plan is not None:
            limits = PlanLimits(
                backdated_days=obj.plan.backdated_days,
                credit_enabled=obj.plan.can_track_credits,
            )
        return {
            "name": obj.plan.name if obj.plan else None,
            "backdated_days": limits.backdated_days,
            "credit_enabled": limits.credit_enabled,
        }
