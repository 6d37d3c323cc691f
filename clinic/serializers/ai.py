"""
Input and output schemas of the AI flows.

Input serializers validate what the client sends before a prompt is
built.  Output serializers validate what the model answered; a model
answer that does not fit is reported as ``invalid_model_output``.
"""
from rest_framework import serializers

from .common import CleanCharField

SIMULATION_ACTIONS = [
    'ADMIT_PATIENT_TO_EMERGENCY',
    'TRANSFER_PATIENT_FROM_EMERGENCY_TO_ICU',
    'TRANSFER_PATIENT_FROM_EMERGENCY_TO_WARD',
    'DISCHARGE_PATIENT',
    'CREATE_SERVICE_REQUEST',
    'ADVANCE_SERVICE_REQUEST',
    'NO_ACTION',
]
# actions that must name a patient currently in the hospital
PATIENT_ACTIONS = {
    'TRANSFER_PATIENT_FROM_EMERGENCY_TO_ICU',
    'TRANSFER_PATIENT_FROM_EMERGENCY_TO_WARD',
    'DISCHARGE_PATIENT',
}

INVOICE_LABELS = [
    'invoiceTitle', 'patientName', 'patientId', 'invoiceDate', 'totalCharges',
    'totalPayments', 'balanceDue', 'itemDescription', 'date', 'amount', 'iqd',
    'summary', 'footerNotes',
]


# ---------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------
class ChatInputSerializer(serializers.Serializer):
    question = CleanCharField(max_length=4000)


class ChatOutputSerializer(serializers.Serializer):
    answer = serializers.CharField(allow_blank=True, trim_whitespace=False)


# ---------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------
class DoctorInfoSerializer(serializers.Serializer):
    name = serializers.CharField()
    specialty = serializers.CharField(required=False, allow_blank=True)
    clinicAddress = serializers.CharField(required=False, allow_blank=True)


class TranslateInputSerializer(serializers.Serializer):
    doctors = DoctorInfoSerializer(many=True, allow_empty=False)
    targetLanguage = CleanCharField(max_length=64)


class TranslateOutputSerializer(serializers.Serializer):
    doctors = DoctorInfoSerializer(many=True)


# ---------------------------------------------------------------------
# Internet search / suggestions
# ---------------------------------------------------------------------
class InternetSearchInputSerializer(serializers.Serializer):
    query = CleanCharField(max_length=500)


class FoundDoctorSerializer(serializers.Serializer):
    name = serializers.CharField()
    specialty = serializers.CharField(allow_blank=True)
    phoneNumber = serializers.CharField(allow_blank=True)
    address = serializers.CharField(allow_blank=True)


class InternetSearchOutputSerializer(serializers.Serializer):
    doctors = FoundDoctorSerializer(many=True)


class SuggestDoctorsInputSerializer(serializers.Serializer):
    location = CleanCharField(max_length=255)
    specialty = CleanCharField(max_length=128)
    language = CleanCharField(max_length=64)


class SuggestedDoctorSerializer(serializers.Serializer):
    name = serializers.CharField()
    address = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(allow_blank=True)
    specialty = serializers.CharField(allow_blank=True)


# ---------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------
class FinancialRecordSerializer(serializers.Serializer):
    id = serializers.CharField(required=False)
    type = CleanCharField(max_length=64)
    description = CleanCharField(max_length=500)
    amount = serializers.FloatField()
    date = CleanCharField(max_length=64)


class InvoiceLabelsSerializer(serializers.Serializer):
    def get_fields(self):
        return {name: CleanCharField(max_length=255, allow_blank=True) for name in INVOICE_LABELS}


class InvoiceInputSerializer(serializers.Serializer):
    patientName = CleanCharField(max_length=255)
    patientId = CleanCharField(max_length=64)
    records = FinancialRecordSerializer(many=True)
    hospitalName = CleanCharField(max_length=255)
    hospitalLogoUrl = serializers.URLField()
    lang = serializers.ChoiceField(choices=['en', 'ar'])
    labels = InvoiceLabelsSerializer()


class InvoiceOutputSerializer(serializers.Serializer):
    html = serializers.CharField(trim_whitespace=False)


# ---------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------
class SimPatientSerializer(serializers.Serializer):
    id = serializers.CharField()
    patientName = serializers.CharField()
    department = serializers.CharField()
    status = serializers.CharField(required=False, allow_blank=True)
    triageLevel = serializers.CharField(required=False, allow_blank=True)
    admittedAt = serializers.CharField(required=False, allow_blank=True)


class SimDoctorSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    specialty = serializers.CharField()


class ServiceRequestSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    status = serializers.CharField()
    department = serializers.CharField()


class OccupancySerializer(serializers.Serializer):
    count = serializers.IntegerField(min_value=0)
    capacity = serializers.IntegerField(min_value=0)


class DepartmentsSerializer(serializers.Serializer):
    emergency = OccupancySerializer()
    icu = OccupancySerializer()
    wards = OccupancySerializer()


class SimulationStateSerializer(serializers.Serializer):
    patients = SimPatientSerializer(many=True)
    doctors = SimDoctorSerializer(many=True)
    departments = DepartmentsSerializer()
    serviceRequests = ServiceRequestSerializer(many=True)


class SimulationActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=SIMULATION_ACTIONS)
    patientId = serializers.CharField(required=False, allow_blank=True)
    details = serializers.CharField(required=False, allow_blank=True)


class SimulationOutputSerializer(serializers.Serializer):
    actions = SimulationActionSerializer(many=True)
