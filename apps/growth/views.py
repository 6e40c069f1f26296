# ===== apps/growth/views.py =====

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from django.core.exceptions import ObjectDoesNotExist

import logging

from apps.analytics import metrics
from apps.trading.quarters import current_year

from . import repository
from .repository import GrowthRepoError
from .serializers import GrowthAccountSerializer, GrowthFilterSerializer

logger = logging.getLogger(__name__)


def _filters(request):
    """Query filters with "all" / empty values dropped."""
    raw = {
        key: value
        for key, value in request.query_params.items()
        if value not in ("", "all")
    }
    serializer = GrowthFilterSerializer(data=raw)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# ============================================================
# ACCOUNTS
# ============================================================

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def accounts(request):
    if request.method == "GET":
        filters = _filters(request)
        try:
            rows = repository.list_accounts(
                request.user,
                year=filters.get("year"),
                quarter=filters.get("quarter"),
            )
        except GrowthRepoError as e:
            return Response({"error": e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"accounts": rows})

    serializer = GrowthAccountSerializer(data=request.data, context={"request": request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        account = repository.create_account(request.user, serializer.validated_data)
    except GrowthRepoError as e:
        logger.exception("create growth account failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    return Response(account, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def account_detail(request, account_id):
    try:
        if request.method == "DELETE":
            repository.delete_account(request.user, account_id)
            return Response(status=status.HTTP_204_NO_CONTENT)

        instance = repository.get_account(request.user, account_id)
        serializer = GrowthAccountSerializer(
            instance,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        account = repository.update_account(request.user, account_id, serializer.validated_data)
        return Response(account)

    except ObjectDoesNotExist:
        return Response({"error": "Growth account not found"}, status=status.HTTP_404_NOT_FOUND)

    except GrowthRepoError as e:
        logger.exception("growth account write failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)


# ============================================================
# DASHBOARD
# ============================================================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def dashboard(request):
    filters = _filters(request)
    year = filters.get("year") or current_year()

    try:
        rows = repository.list_accounts(
            request.user,
            year=year,
            quarter=filters.get("quarter"),
            account_name=filters.get("account"),
        )
        names = repository.account_names(request.user, year=year)
        years = repository.available_years(request.user)
    except GrowthRepoError as e:
        return Response({"error": e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        "year": year,
        "accounts": rows,
        "account_names": names,
        "years": years,
        "trajectory": metrics.capital_trajectory(rows),
        "cumulative_capital": metrics.cumulative_capital(rows),
        "summary": metrics.growth_summary(rows),
    })
