"""
Doctor directory endpoints (approved accounts only).

Bulk operations that touch every record (uncheck partners, reset
referrals, import) are audited in the service layer.
"""
import json

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor
from clinic.permissions import IsActiveAccount
from clinic.serializers.doctors import (
    AvailableDaySerializer,
    DoctorListQuerySerializer,
    DoctorSerializer,
    ExportQuerySerializer,
    LocationSerializer,
    ReferralAdjustSerializer,
    ReferralNotesSerializer,
)
from clinic.services import doctors as svc
from clinic.services import transfer

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def list_doctors(request):
    """Return the directory, newest first.
    Query params:
      - q: case-insensitive name search
      - partners: 1|0 (partners only)
      - specialty: exact specialty (case-insensitive)
      - page, pageSize: pagination (optional)
    """
    q = DoctorListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs, total = svc.search_doctors(
        q=(vd.get('q') or '').strip() or None,
        partners=vd.get('partners', False),
        specialty=(vd.get('specialty') or '').strip() or None,
        page=vd.get('page'),
        page_size=vd.get('pageSize'),
    )
    return Response({
        'ok': True,
        'data': DoctorSerializer(qs, many=True).data,
        'pagination': {'total': total, 'page': vd.get('page') or 1, 'pageSize': vd.get('pageSize') or total},
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def create_doctor(request):
    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.create_doctor(request.user, dict(s.validated_data))
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def doctor_detail(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def update_doctor(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    s = DoctorSerializer(doctor, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    doctor = svc.update_doctor(doctor, dict(s.validated_data))
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def delete_doctor(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    removed = svc.delete_doctor(request.user, doctor)
    return Response({'ok': True, 'patientsDeleted': removed})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def adjust_referrals(request, pk):
    s = ReferralAdjustSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.adjust_referrals(pk, s.validated_data['amount'])
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def set_referral_notes(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    s = ReferralNotesSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.set_referral_notes(doctor, s.validated_data['notes'])
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def toggle_partner(request, pk):
    doctor = svc.toggle_partner(get_object_or_404(Doctor, pk=pk))
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def toggle_available_day(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    s = AvailableDaySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.toggle_available_day(doctor, s.validated_data['day'])
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def set_location(request, pk):
    doctor = get_object_or_404(Doctor, pk=pk)
    s = LocationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.set_location(doctor, s.validated_data['lat'], s.validated_data['lng'])
    return Response({'ok': True, 'doctor': DoctorSerializer(doctor).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def partner_dashboard(request):
    partners = svc.partner_dashboard()
    data = DoctorSerializer(partners, many=True).data
    return Response({
        'ok': True,
        'data': data,
        'totalReferrals': sum(d['referralCount'] for d in data),
        'totalCommission': sum(d['commission'] for d in data),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def uncheck_all_partners(request):
    return Response({'ok': True, 'updated': svc.uncheck_all_partners(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def reset_all_referrals(request):
    return Response({'ok': True, **svc.reset_all_referrals(request.user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def list_specialties(request):
    q = (request.query_params.get('q') or '').strip() or None
    return Response({'ok': True, 'data': svc.specialties(q)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def export_doctors(request):
    q = ExportQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    file_name = transfer.export_file_name(q.validated_data.get('fileName'))
    rows = transfer.export_doctors(partners_only=q.validated_data['partners'])
    body = json.dumps(rows, ensure_ascii=False, indent=2)
    resp = HttpResponse(body, content_type='application/json; charset=utf-8')
    resp['Content-Disposition'] = f'attachment; filename="{file_name}"'
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@parser_classes([MultiPartParser, JSONParser])
def import_doctors(request):
    """Import a backup: multipart ``file`` upload or a JSON array body."""
    upload = request.FILES.get('file')
    if upload is not None:
        entries = transfer.parse_payload(upload.read(), file_name=upload.name)
    else:
        entries = transfer.parse_payload(request.data)
    result = transfer.import_doctors(request.user, entries)
    return Response({'ok': True, **result})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def export_doctors_excel(request):
    """Spreadsheet of the directory; ``partners=1`` exports the partner dashboard."""
    q = ExportQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    file_name = transfer.export_file_name(q.validated_data.get('fileName'), suffix='.xlsx', default_stem='doctors')
    body = transfer.export_workbook(transfer.export_doctors(partners_only=q.validated_data['partners']))
    resp = HttpResponse(body, content_type=XLSX_CONTENT_TYPE)
    resp['Content-Disposition'] = f'attachment; filename="{file_name}"'
    return resp
