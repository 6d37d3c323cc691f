from rest_framework import serializers

from clinic.models import InstrumentSet
from .common import CleanCharField


class SterilizationRequestSerializer(serializers.Serializer):
    description = CleanCharField(max_length=255)
    department = CleanCharField(max_length=128)


class InstrumentSetSerializer(serializers.ModelSerializer):
    cycleStartTime = serializers.IntegerField(source='cycle_start_time', read_only=True)
    cycleDuration = serializers.IntegerField(source='cycle_duration', read_only=True)

    class Meta:
        model = InstrumentSet
        fields = ['id', 'name', 'department', 'status', 'cycleStartTime', 'cycleDuration']
        read_only_fields = fields
