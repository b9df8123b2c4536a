from rest_framework import serializers

from .models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """Who created or recorded something; never exposes credentials."""

    class Meta:
        model = User
        fields = ("id", "name", "email")
