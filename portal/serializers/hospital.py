from rest_framework import serializers

from portal.models import Hospital


class HospitalListQuerySerializer(serializers.Serializer):
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    type = serializers.ChoiceField(choices=[t for t, _ in Hospital.TYPE_CHOICES], required=False)
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1)


class NearbyQuerySerializer(serializers.Serializer):
    maxDistance = serializers.FloatField(required=False, min_value=0)


class AqiQuerySerializer(serializers.Serializer):
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lon = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def validate(self, attrs):
        if attrs.get('lat') is None or attrs.get('lon') is None:
            raise serializers.ValidationError('Latitude and longitude are required')
        return attrs
