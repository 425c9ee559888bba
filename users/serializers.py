from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current identity, shaped like the client's session user."""
    id = serializers.SerializerMethodField()
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'display_name', 'avatar_url']
        read_only_fields = fields

    def get_id(self, obj):
        return str(obj.pk)


class CaptainProfileSerializer(serializers.ModelSerializer):
    """The slice of a captain's profile that is joined onto team rows."""

    class Meta:
        model = User
        fields = ['full_name', 'email']
        read_only_fields = fields
