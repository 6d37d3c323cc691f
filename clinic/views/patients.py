"""
Referred patient endpoints.

Patients are listed newest referral first, optionally for one doctor.
Deleting every patient is reserved to administrators.
"""
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor, Patient
from clinic.permissions import IsActiveAccount, IsAdminRole
from clinic.serializers.patients import PatientListQuerySerializer, PatientSerializer
from clinic.services import patients as svc


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def list_patients(request):
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = svc.list_patients((q.validated_data.get('doctorId') or '').strip() or None)
    return Response({'ok': True, 'data': PatientSerializer(qs, many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def create_patient(request):
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = s.save()
    return Response({'ok': True, 'patient': PatientSerializer(patient).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def patient_detail(request, pk):
    patient = get_object_or_404(Patient, pk=pk)
    return Response({'ok': True, 'patient': PatientSerializer(patient).data})


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def update_patient(request, pk):
    patient = get_object_or_404(Patient, pk=pk)
    s = PatientSerializer(patient, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = svc.update_patient(patient, dict(s.validated_data))
    return Response({'ok': True, 'patient': PatientSerializer(patient).data})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def delete_patient(request, pk):
    get_object_or_404(Patient, pk=pk).delete()
    return Response({'ok': True})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def delete_patients_by_doctor(request, doctor_id):
    doctor = get_object_or_404(Doctor, pk=doctor_id)
    return Response({'ok': True, 'deleted': svc.delete_by_doctor(request.user, doctor.id)})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def delete_all_patients(request):
    return Response({'ok': True, 'deleted': svc.delete_all(request.user)})
