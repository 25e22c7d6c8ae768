import logging

from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .serializers import (
    ArrivalSerializer,
    ParameterSerializer,
    ProductSerializer,
    QualitySerializer,
    QuotaSerializer,
    SiloSerializer,
    ThresholdSerializer,
    WeighingSerializer,
)
from .services import errors
from .services.reception import ReceptionService
from .services.reports import WINDOW_TODAY
from .utils.jsonsafe import json_safe

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    errors.ValidationError: 400,
    errors.InactiveOrUnknownProductError: 400,
    errors.InvalidTareError: 400,
    errors.DuplicateQuotaError: 409,
    errors.InvalidTransitionError: 409,
    errors.CapacityError: 409,
}


def _service():
    return ReceptionService()


def _invalid(ser):
    return Response(
        {"error": errors.ValidationError.code, "detail": "Missing/invalid fields", "details": ser.errors},
        status=400,
    )


def _error_response(exc):
    return Response(exc.as_dict(), status=ERROR_STATUS.get(type(exc), 400))


def _outcome_response(outcome, success_status=200):
    if outcome.error is not None:
        return _error_response(outcome.error)
    payload = {
        "status": outcome.status,
        "operation": json_safe(outcome.operation),
        "warnings": json_safe(outcome.warnings),
    }
    if outcome.allocation is not None:
        payload["allocation"] = {
            "net_weight": outcome.allocation.net_weight,
            "deltas": json_safe(outcome.allocation.deltas),
        }
    return Response(payload, status=202 if outcome.needs_confirmation else success_status)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def grant_quota(request):
    ser = QuotaSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    data = ser.validated_data
    outcome = _service().grant_quota(data["plate"], data["product_code"], data["quota_date"])
    return _outcome_response(outcome, success_status=201)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def register_arrival(request):
    ser = ArrivalSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    return _outcome_response(_service().register_arrival(ser.validated_data["plate"]))


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_quality(request):
    ser = QualitySerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    data = ser.validated_data
    return _outcome_response(_service().submit_quality(data["plate"], data["measurements"]))


def _weighing(request, action):
    ser = WeighingSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    data = ser.validated_data
    return _outcome_response(action(data["plate"], data["weight"], confirmed=data["confirmed"]))


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def record_gross(request):
    return _weighing(request, _service().record_gross)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def correct_gross(request):
    return _weighing(request, _service().correct_gross)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def record_tare(request):
    return _weighing(request, _service().record_tare)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def work_queue(request, stage):
    try:
        ops = _service().queue(stage)
    except errors.ReceptionError as exc:
        return _error_response(exc)
    return Response({"stage": stage, "operations": json_safe(ops)})


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def report(request):
    window = request.query_params.get("window", WINDOW_TODAY)
    try:
        result = _service().report(window)
    except errors.ReceptionError as exc:
        return _error_response(exc)
    return Response(json_safe(result))


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def silo_utilization(request):
    return Response({"silos": _service().silo_utilization()})


def _catalog_view(serializer_class, attr, save):
    @api_view(["GET", "POST"])
    @permission_classes([permissions.AllowAny])
    def view(request):
        service = _service()
        if request.method == "GET":
            return Response({attr: json_safe(getattr(service.state(), attr))})
        ser = serializer_class(data=request.data)
        if not ser.is_valid():
            return _invalid(ser)
        try:
            state = save(service, ser.to_record())
        except errors.ReceptionError as exc:
            return _error_response(exc)
        return Response({attr: json_safe(getattr(state, attr))}, status=201)

    view.__name__ = f"catalog_{attr}"
    return view


catalog_products = _catalog_view(ProductSerializer, "products", ReceptionService.save_product)
catalog_parameters = _catalog_view(ParameterSerializer, "parameters", ReceptionService.save_parameter)
catalog_thresholds = _catalog_view(ThresholdSerializer, "thresholds", ReceptionService.save_threshold)
catalog_silos = _catalog_view(SiloSerializer, "silos", ReceptionService.save_silo)


@api_view(["DELETE"])
@permission_classes([permissions.AllowAny])
def delete_silo(request, code):
    try:
        state = _service().delete_silo(code)
    except errors.ReceptionError as exc:
        return _error_response(exc)
    logger.info("Silo %s removed", code)
    return Response({"silos": json_safe(state.silos)})
