from rest_framework import serializers


class LocationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(required=False, allow_null=True)
    longitude = serializers.FloatField(required=False, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    state = serializers.CharField(required=False, allow_blank=True, max_length=120)
    country = serializers.CharField(required=False, allow_blank=True, max_length=120)


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    relation = serializers.CharField(required=False, allow_blank=True, max_length=50)
    mobile = serializers.CharField(required=False, allow_blank=True, max_length=15)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, min_length=2, max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    bloodGroup = serializers.ChoiceField(choices=['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-'],
                                         required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    location = LocationSerializer(required=False)
    emergencyContact = EmergencyContactSerializer(required=False)
