"""
Serializers for teams app.
"""

from rest_framework import serializers

from .models import Team


class TeamSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Team
        fields = ['id', 'name', 'slug', 'owner_id', 'created_at', 'updated_at']
        read_only_fields = fields


class TeamWriteSerializer(serializers.Serializer):
    """Create/rename payload. The slug always follows the name."""
    name = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "The name field is required.",
            "blank": "The name field is required.",
            "null": "The name field is required.",
        },
    )


class DashboardTeamSerializer(TeamSerializer):
    owner_email = serializers.EmailField(source='owner.email', read_only=True)
    members_count = serializers.IntegerField(source='memberships.count', read_only=True)
    subscribed = serializers.BooleanField(read_only=True)

    class Meta(TeamSerializer.Meta):
        fields = TeamSerializer.Meta.fields + ['owner_email', 'members_count', 'subscribed']
        read_only_fields = fields
