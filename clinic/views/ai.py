"""
AI helper endpoints.

Each endpoint validates its input, runs the matching flow and returns
the flow's validated output.  Failures of the model surface as 502
(``upstream_error`` / ``invalid_model_output``) and a disabled AI
backend as 503.
"""
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsActiveAccount
from clinic.serializers.ai import (
    ChatInputSerializer,
    InternetSearchInputSerializer,
    InvoiceInputSerializer,
    SimulationStateSerializer,
    SuggestDoctorsInputSerializer,
    TranslateInputSerializer,
)
from clinic.services import flows
from clinic.throttles import AIRateThrottle


def _input(serializer_cls, request) -> dict:
    s = serializer_cls(data=request.data)
    s.is_valid(raise_exception=True)
    return s.validated_data


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_chat(request):
    v = _input(ChatInputSerializer, request)
    return Response({'ok': True, **flows.chat(v['question'])})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_translate(request):
    v = _input(TranslateInputSerializer, request)
    doctors = [dict(d) for d in v['doctors']]
    return Response({'ok': True, **flows.translate(doctors, v['targetLanguage'])})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_internet_search(request):
    v = _input(InternetSearchInputSerializer, request)
    return Response({'ok': True, **flows.internet_search(v['query'])})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_suggest_doctors(request):
    v = _input(SuggestDoctorsInputSerializer, request)
    return Response({'ok': True, 'data': flows.suggest_doctors(v['location'], v['specialty'], v['language'])})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_invoice(request):
    v = _input(InvoiceInputSerializer, request)
    return Response({'ok': True, **flows.invoice(v)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
@throttle_classes([AIRateThrottle])
def ai_simulation(request):
    v = _input(SimulationStateSerializer, request)
    return Response({'ok': True, **flows.simulation_cycle(v)})
