import re

from rest_framework import serializers

ABHA_RE = re.compile(r'^\d{2}-\d{4}-\d{4}-\d{4}$')
MOBILE_RE = re.compile(r'^[6-9]\d{9}$')


class RegisterSerializer(serializers.Serializer):
    abhaId = serializers.CharField()
    name = serializers.CharField()
    mobile = serializers.CharField()
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True)
    dateOfBirth = serializers.DateField(input_formats=['iso-8601'])
    gender = serializers.ChoiceField(choices=['Male', 'Female', 'Other'])
    bloodGroup = serializers.ChoiceField(choices=['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-'],
                                         required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)

    def validate_abhaId(self, v):
        v = (v or '').strip()
        if not ABHA_RE.match(v):
            raise serializers.ValidationError('Invalid ABHA ID format. Use XX-XXXX-XXXX-XXXX')
        return v

    def validate_name(self, v):
        v = (v or '').strip()
        if not 2 <= len(v) <= 100:
            raise serializers.ValidationError('Name must be between 2 and 100 characters')
        return v

    def validate_mobile(self, v):
        v = (v or '').strip()
        if not MOBILE_RE.match(v):
            raise serializers.ValidationError('Invalid mobile number. Must be 10 digits starting with 6-9')
        return v

    def validate_email(self, v):
        return (v or '').strip().lower()

    def validate_password(self, v):
        if len(v or '') < 6:
            raise serializers.ValidationError('Password must be at least 6 characters long')
        return v


class LoginSerializer(serializers.Serializer):
    abhaId = serializers.CharField(required=False, allow_blank=True)
    mobile = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        attrs['abhaId'] = (attrs.get('abhaId') or '').strip()
        attrs['mobile'] = (attrs.get('mobile') or '').strip()
        if not attrs.get('password') or not (attrs['abhaId'] or attrs['mobile']):
            raise serializers.ValidationError('Please provide ABHA ID or mobile and password')
        return attrs


class GovernmentLoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v
