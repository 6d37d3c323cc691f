"""
Serializers for the doctor directory.

Field names are camelCase to match the front-end's ``Doctor`` type;
free text is cleaned with bleach on the way in.
"""
from rest_framework import serializers

from clinic.models import Doctor
from .common import CleanCharField, clean_text

WEEKDAYS = ['Sat', 'Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri']
# one note is kept per referral, so the count is bounded
MAX_REFERRALS = 10_000
NOTE_KEYS = ('patientName', 'referralDate', 'testDate', 'testType', 'patientAge', 'chronicDiseases')


class ReferralNoteField(serializers.Field):
    """A referral note: the structured object, or a legacy free-text string."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            return clean_text(data)
        if isinstance(data, dict):
            return {k: clean_text(str(data.get(k) or '')) for k in NOTE_KEYS}
        raise serializers.ValidationError('A referral note must be an object or a string.')

    def to_representation(self, value):
        return value


class DoctorSerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255)
    specialty = CleanCharField(max_length=128)
    phoneNumber = CleanCharField(source='phone_number', max_length=32)
    clinicAddress = CleanCharField(source='clinic_address')
    mapLocation = serializers.CharField(source='map_location', max_length=500, required=False, allow_blank=True)
    clinicCardImageUrl = serializers.CharField(source='clinic_card_image_url', required=False, allow_blank=True)
    isPartner = serializers.BooleanField(source='is_partner', required=False)
    referralCount = serializers.IntegerField(
        source='referral_count', min_value=0, max_value=MAX_REFERRALS, required=False
    )
    referralNotes = serializers.ListField(source='referral_notes', child=ReferralNoteField(), required=False)
    availableDays = serializers.ListField(
        source='available_days', child=serializers.ChoiceField(choices=WEEKDAYS), required=False
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    createdBy = serializers.PrimaryKeyRelatedField(source='created_by', read_only=True)
    commission = serializers.IntegerField(read_only=True)

    class Meta:
        model = Doctor
        fields = [
            'id', 'name', 'specialty', 'phoneNumber', 'clinicAddress', 'mapLocation',
            'clinicCardImageUrl', 'isPartner', 'referralCount', 'referralNotes',
            'availableDays', 'createdAt', 'createdBy', 'commission',
        ]
        read_only_fields = ['id']

    def validate_mapLocation(self, v):
        v = (v or '').strip()
        if v and not v.startswith(('http://', 'https://')):
            raise serializers.ValidationError('Map location must be a URL.')
        return v

    def validate_clinicCardImageUrl(self, v):
        v = (v or '').strip()
        if v and not v.startswith(('data:image/', 'http://', 'https://')):
            raise serializers.ValidationError('Clinic card must be an image data URL or a link.')
        return v

    def validate_availableDays(self, v):
        # keep weekday order, drop duplicates
        return [d for d in WEEKDAYS if d in set(v)]


class DoctorListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    partners = serializers.BooleanField(required=False, default=False)
    specialty = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=500)


class ReferralAdjustSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=-MAX_REFERRALS, max_value=MAX_REFERRALS)

    def validate_amount(self, v):
        if v == 0:
            raise serializers.ValidationError('Amount must not be zero.')
        return v


class ReferralNotesSerializer(serializers.Serializer):
    notes = serializers.ListField(child=ReferralNoteField())


class AvailableDaySerializer(serializers.Serializer):
    day = serializers.ChoiceField(choices=WEEKDAYS)


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class ExportQuerySerializer(serializers.Serializer):
    fileName = serializers.CharField(required=False, allow_blank=True, max_length=120)
    partners = serializers.BooleanField(required=False, default=False)
