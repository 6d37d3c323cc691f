"""Referral statistics for the admin dashboard (local calendar days)."""
from datetime import datetime, time, timedelta
from typing import Optional

from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from clinic.models import Doctor, Patient


def percent_change(current: int, previous: int) -> Optional[float]:
    """Change in percent; ``None`` when growing from zero."""
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    return None if current > 0 else 0.0


def _since(day) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def patient_stats(now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    today = timezone.localdate(now)
    week_start = today - timedelta(days=6)

    rows = (
        Patient.objects.filter(created_at__gte=_since(today - timedelta(days=13)))
        .annotate(day=TruncDate('created_at', tzinfo=timezone.get_current_timezone()))
        .values('day')
        .annotate(n=Count('id'))
    )
    per_day = {r['day']: r['n'] for r in rows}

    last7 = [today - timedelta(days=i) for i in range(6, -1, -1)]
    weekly = sum(per_day.get(d, 0) for d in last7)
    previous = sum(per_day.get(today - timedelta(days=i), 0) for i in range(7, 14))

    top = (
        Patient.objects.filter(created_at__gte=_since(week_start))
        .values('referring_doctor')
        .annotate(n=Count('id'))
        .order_by('-n', 'referring_doctor')
        .first()
    )
    busiest = None
    if top:
        doctor = Doctor.objects.filter(id=top['referring_doctor']).only('id', 'name').first()
        busiest = {'doctorId': top['referring_doctor'], 'name': doctor.name if doctor else '', 'count': top['n']}

    today_count = per_day.get(today, 0)
    return {
        'todayCount': today_count,
        'dailyChange': percent_change(today_count, per_day.get(today - timedelta(days=1), 0)),
        'weeklyCount': weekly,
        'weeklyChange': percent_change(weekly, previous),
        'busiestDoctor': busiest,
        'dailyTraffic': [{'date': d.isoformat(), 'name': d.strftime('%a'), 'total': per_day.get(d, 0)} for d in last7],
    }
