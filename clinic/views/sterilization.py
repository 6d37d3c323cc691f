from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsActiveAccount
from clinic.serializers.sterilization import InstrumentSetSerializer, SterilizationRequestSerializer
from clinic.services import sterilization as svc


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def request_sterilization(request):
    s = SterilizationRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    obj = svc.request_set(**s.validated_data)
    return Response({'ok': True, 'newInstrumentSet': InstrumentSetSerializer(obj).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def list_instrument_sets(request):
    department = (request.query_params.get('department') or '').strip() or None
    return Response({'ok': True, 'data': InstrumentSetSerializer(svc.list_sets(department), many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount])
def advance_instrument_set(request, pk):
    obj = svc.advance(pk)
    return Response({'ok': True, 'instrumentSet': InstrumentSetSerializer(obj).data})
