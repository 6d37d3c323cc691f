from rest_framework import serializers

from clinic.models import Doctor, Patient
from .common import CleanCharField


class PatientSerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255)
    phoneNumber = CleanCharField(source='phone_number', max_length=32, required=False, allow_blank=True)
    referringDoctorId = serializers.PrimaryKeyRelatedField(source='referring_doctor', queryset=Doctor.objects.all())
    referralDate = serializers.DateTimeField(source='referral_date', required=False)
    visitDate = serializers.DateTimeField(source='visit_date', required=False, allow_null=True)
    status = serializers.ChoiceField(choices=[c[0] for c in Patient.STATUS_CHOICES], required=False)
    notes = CleanCharField(required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Patient
        fields = ['id', 'name', 'phoneNumber', 'referringDoctorId', 'referralDate', 'visitDate', 'status', 'notes', 'createdAt']
        read_only_fields = ['id']


class PatientListQuerySerializer(serializers.Serializer):
    doctorId = serializers.CharField(required=False, allow_blank=True)
