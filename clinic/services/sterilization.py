import random
import time

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import ValidationError

from clinic.models import InstrumentSet


def new_set_id(now_ms: int) -> str:
    return f"set-{now_ms}-{random.randint(0, 10**9):09d}"


def request_set(*, description: str, department: str) -> InstrumentSet:
    """Queue a new instrument set for cleaning; the cycle takes 15 to 30 minutes."""
    now_ms = int(time.time() * 1000)
    return InstrumentSet.objects.create(
        id=new_set_id(now_ms),
        name=description,
        department=department,
        status=InstrumentSet.STATUS_CLEANING,
        cycle_start_time=now_ms,
        cycle_duration=random.randint(15 * 60, 30 * 60),
    )


def list_sets(department: str | None = None):
    qs = InstrumentSet.objects.all()
    if department:
        qs = qs.filter(department=department)
    return qs


@transaction.atomic
def advance(set_id: str) -> InstrumentSet:
    obj = get_object_or_404(InstrumentSet.objects.select_for_update(), id=set_id)
    flow = InstrumentSet.STATUS_FLOW
    i = flow.index(obj.status)
    if i == len(flow) - 1:
        raise ValidationError({'detail': 'Instrument set is already in storage.'})
    obj.status = flow[i + 1]
    obj.cycle_start_time = int(time.time() * 1000)
    obj.save(update_fields=['status', 'cycle_start_time'])
    return obj
