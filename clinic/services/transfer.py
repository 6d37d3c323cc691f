"""
JSON backup export and import of the doctor directory, plus the Excel
export of the directory.

Imported entries are normalized the same way the browser client did it:
entries without an id or a name are skipped, missing fields get
defaults, and ``isPartner`` / ``referralCount`` are coerced from loose
JSON.  Existing ids are overwritten.
"""
import io
import json
import logging
import re
from datetime import date
from typing import Any, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter
from rest_framework.exceptions import ValidationError

from clinic.models import Doctor
from clinic.serializers.common import clean_text
from clinic.serializers.doctors import MAX_REFERRALS, DoctorSerializer, ReferralNoteField, WEEKDAYS
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

EXPORT_EXCLUDE = ('createdBy', 'commission')
# route segments under api/doctors/ that an imported id must not shadow
RESERVED_IDS = {
    'create', 'partners', 'specialties', 'export', 'export-excel', 'import',
    'uncheck-partners', 'reset-referrals',
}
# Excel refuses longer cell values
XLSX_CELL_MAX = 32767
XLSX_COLUMN_MAX_WIDTH = 60

_UNSAFE_NAME_RE = re.compile(r'[\x00-\x1f\x7f"]')


def export_file_name(name: Optional[str], *, suffix: str = '.json', default_stem: str = 'doctors-backup') -> str:
    """Download name for an export; control characters and quotes are dropped."""
    name = _UNSAFE_NAME_RE.sub('', (name or '').strip())
    name = name.replace('/', '_').replace('\\', '_') or f"{default_stem}-{date.today().isoformat()}"
    return name if name.endswith(suffix) else f"{name}{suffix}"


def export_doctors(*, partners_only: bool = False) -> list[dict]:
    qs = Doctor.objects.order_by('-created_at')
    if partners_only:
        qs = Doctor.objects.filter(is_partner=True).order_by('-referral_count', 'name')
    rows = DoctorSerializer(qs, many=True).data
    return [{k: v for k, v in row.items() if k not in EXPORT_EXCLUDE} for row in rows]


def _cell(value):
    if value is None:
        return ''
    if isinstance(value, list):
        value = ', '.join(v if isinstance(v, str) else json.dumps(v, ensure_ascii=False) for v in value)
    elif isinstance(value, dict):
        value = json.dumps(value, ensure_ascii=False)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub('', value)[:XLSX_CELL_MAX]
    return value


def export_workbook(rows: list[dict]) -> bytes:
    """One ``Data`` sheet, a header row of field names and auto-fitted columns."""
    wb = Workbook()
    ws = wb.active
    ws.title = 'Data'
    if rows:
        headers = list(rows[0])
        ws.append(headers)
        cells = [[_cell(row.get(h)) for h in headers] for row in rows]
        for line in cells:
            ws.append(line)
        for i, header in enumerate(headers):
            width = max([len(header)] + [len(str(line[i])) for line in cells])
            ws.column_dimensions[get_column_letter(i + 1)].width = min(width + 2, XLSX_COLUMN_MAX_WIDTH)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def parse_payload(raw: Any, *, file_name: Optional[str] = None) -> list:
    """Turn an uploaded file or a request body into the list of entries."""
    if file_name is not None and not file_name.lower().endswith('.json'):
        raise ValidationError({'file': ['Please select a .json backup file.']})
    if isinstance(raw, (bytes, str)):
        if len(raw) > settings.IMPORT_MAX_MB * 1024 * 1024:
            raise ValidationError({'file': [f'Backup files are limited to {settings.IMPORT_MAX_MB} MB.']})
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError({'file': ['File is not valid or is corrupted.']})
    if isinstance(raw, dict) and 'doctors' in raw:
        raw = raw['doctors']
    if not isinstance(raw, list):
        raise ValidationError({'detail': 'Imported data is not in a valid format.'})
    return raw


def _count(v) -> int:
    try:
        count = int(float(v))
    except (TypeError, ValueError, OverflowError):
        return 0
    return min(MAX_REFERRALS, max(0, count))


def _notes(v) -> list:
    if not isinstance(v, list):
        return []
    field = ReferralNoteField()
    out = []
    for item in v:
        try:
            out.append(field.to_internal_value(item))
        except ValidationError:
            continue
    return out


def _created_at(v):
    try:
        value = parse_datetime(str(v or ''))
    except ValueError:
        value = None
    if value is None:
        return timezone.now()
    return timezone.make_aware(value) if timezone.is_naive(value) else value


def normalize_entry(d) -> Optional[dict]:
    if not isinstance(d, dict) or not d.get('id') or not d.get('name'):
        return None
    doctor_id = str(d['id'])
    if len(doctor_id) > 64 or doctor_id in RESERVED_IDS or '/' in doctor_id:
        return None
    days = d.get('availableDays') if isinstance(d.get('availableDays'), list) else []
    return {
        'id': doctor_id,
        'name': clean_text(str(d['name']))[:255],
        'specialty': clean_text(str(d.get('specialty') or ''))[:128],
        'phone_number': clean_text(str(d.get('phoneNumber') or ''))[:32],
        'clinic_address': clean_text(str(d.get('clinicAddress') or '')),
        'map_location': str(d.get('mapLocation') or '')[:500],
        'clinic_card_image_url': str(d.get('clinicCardImageUrl') or ''),
        'is_partner': d.get('isPartner') is True or d.get('isPartner') == 'true',
        'referral_count': _count(d.get('referralCount')),
        'referral_notes': _notes(d.get('referralNotes')),
        'available_days': [day for day in WEEKDAYS if day in days],
        'created_at': _created_at(d.get('createdAt')),
    }


@transaction.atomic
def import_doctors(actor, entries: list) -> dict:
    created = updated = skipped = 0
    for entry in entries:
        fields = normalize_entry(entry)
        if fields is None:
            logger.warning("Skipping invalid doctor entry: %.200s", entry)
            skipped += 1
            continue
        _, is_new = Doctor.objects.update_or_create(id=fields.pop('id'), defaults=fields)
        if is_new:
            created += 1
        else:
            updated += 1
    result = {'imported': created + updated, 'created': created, 'updated': updated, 'skipped': skipped}
    log_action(user=actor, action='doctors_import', object_type='doctor', detail=result)
    return result
