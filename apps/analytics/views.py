# ===== apps/analytics/views.py =====
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import serializers, status

import logging

from apps.growth import repository as growth_repository
from apps.trading import repository as trading_repository
from apps.trading.quarters import current_quarter, current_year
from apps.users.errors import RepoError

from . import metrics

logger = logging.getLogger(__name__)


class PeriodSerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=1970, max_value=9999)
    quarter = serializers.ChoiceField(required=False, choices=[1, 2, 3, 4])


def _period(request):
    raw = {
        key: value
        for key, value in request.query_params.items()
        if key in ("year", "quarter") and value not in ("", "all")
    }
    serializer = PeriodSerializer(data=raw)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data.get("year") or current_year(), serializer.validated_data.get("quarter")


def _bundles(user, year, quarter):
    if quarter is None:
        return trading_repository.load_year_bundles(user, year)
    return [trading_repository.load_quarter_bundle(user, year, quarter)]


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_summary(request):
    """Header metrics for the current month"""
    try:
        bundle = trading_repository.load_quarter_bundle(
            request.user, current_year(), current_quarter()
        )
    except RepoError as e:
        return Response({'error': e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(metrics.summary_metrics(bundle))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_reports(request):
    """Trading and growth reports for a year (optionally one quarter)"""
    year, quarter = _period(request)

    try:
        bundles = _bundles(request.user, year, quarter)
        rows = growth_repository.list_accounts(request.user, year=year)
    except RepoError as e:
        return Response({'error': e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'year': year,
        'quarter': quarter,
        'trading': metrics.trading_report(bundles),
        'growth': metrics.growth_report(rows),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_overview(request):
    year, quarter = _period(request)

    try:
        bundles = _bundles(request.user, year, quarter)
        rows = growth_repository.list_accounts(request.user, year=year, quarter=quarter)
    except RepoError as e:
        return Response({'error': e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = metrics.overview(bundles, rows)
    data.update({'year': year, 'quarter': quarter})
    return Response(data)
