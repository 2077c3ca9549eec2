import bleach
from rest_framework import serializers

from core.models import Animal


class AnimalCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    species = serializers.ChoiceField(choices=[c for c, _ in Animal.SPECIES_CHOICES])
    breed = serializers.CharField(max_length=100, required=False, allow_blank=True)
    gender = serializers.ChoiceField(choices=[c for c, _ in Animal.GENDER_CHOICES], required=False)
    birthDate = serializers.DateField(required=False, allow_null=True)
    weight = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=0, required=False, allow_null=True)
    color = serializers.CharField(max_length=50, required=False, allow_blank=True)
    microchipId = serializers.CharField(max_length=64, required=False, allow_blank=True)
    isNeutered = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    relation = serializers.CharField(max_length=32, required=False, allow_blank=True)
    guardianId = serializers.IntegerField(min_value=1, required=False)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('이름을 입력해 주세요')
        return v


class AnimalUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    breed = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    gender = serializers.ChoiceField(choices=[c for c, _ in Animal.GENDER_CHOICES], required=False)
    birthDate = serializers.DateField(required=False, allow_null=True)
    weight = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=0, required=False, allow_null=True)
    color = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    microchipId = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    isNeutered = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
