import re

from rest_framework import serializers

from core.models import Hospital, HospitalStaff

BUSINESS_NUMBER_RE = re.compile(r'^\d{3}-?\d{2}-?\d{5}$')


class HospitalCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    businessNumber = serializers.CharField(max_length=32)
    licenseNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_businessNumber(self, v):
        v = v.strip()
        if not BUSINESS_NUMBER_RE.match(v):
            raise serializers.ValidationError('사업자등록번호 형식이 올바르지 않습니다')
        return v


class HospitalUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    licenseNumber = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=[c for c, _ in Hospital.STATUS_CHOICES], required=False)


class HospitalListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Hospital.STATUS_CHOICES], required=False)
    q = serializers.CharField(max_length=64, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class StaffAddSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    position = serializers.ChoiceField(choices=[c for c, _ in HospitalStaff.POSITION_CHOICES],
                                       required=False, default=HospitalStaff.POSITION_STAFF)


class StaffUpdateSerializer(serializers.Serializer):
    position = serializers.ChoiceField(choices=[c for c, _ in HospitalStaff.POSITION_CHOICES], required=False)
    isActive = serializers.BooleanField(required=False)
