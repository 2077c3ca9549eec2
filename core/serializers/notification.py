from rest_framework import serializers


class NotificationListQuerySerializer(serializers.Serializer):
    unreadOnly = serializers.BooleanField(required=False, default=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
