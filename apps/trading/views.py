# ===== apps/trading/views.py =====

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from django.core.exceptions import ObjectDoesNotExist

import logging

from . import repository
from .lifecycle import TradeTransitionError
from .notifications import push_update
from .repository import InvalidQuarterError, TradingRepoError
from .serializers import (
    MonthPatchSerializer,
    TradeCloseSerializer,
    TradeUpdateSerializer,
)

logger = logging.getLogger(__name__)


def _not_found(what):
    return Response({"error": f"{what} not found"}, status=status.HTTP_404_NOT_FOUND)


# ============================================================
# QUARTER BUNDLE (MAIN ENDPOINT FOR THE JOURNAL PAGE)
# ============================================================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def get_quarter(request, year, quarter):
    try:
        bundle = repository.load_quarter_bundle(request.user, year, quarter)
        return Response(bundle)

    except InvalidQuarterError as e:
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    except TradingRepoError as e:
        return Response(
            {"error": e.message},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# ============================================================
# MONTHS
# ============================================================

@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
def update_month(request, year, quarter, month):
    serializer = MonthPatchSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        month_row = repository.resolve_month(request.user, year, quarter, month)
        result = repository.update_month(
            request.user,
            month_row.id,
            notes=serializer.validated_data.get("notes"),
            completed=serializer.validated_data.get("completed"),
        )
    except InvalidQuarterError as e:
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)
    except TradingRepoError as e:
        logger.exception("update_month failed")
        return Response({"error": e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    push_update(request.user, "month.updated", result)
    return Response(result)


# ============================================================
# TRADES
# ============================================================

@api_view(["POST"])
@permission_classes([IsAuthenticated])
def create_trade(request, month_id):
    try:
        trade = repository.create_trade(request.user, month_id)
    except ObjectDoesNotExist:
        return _not_found("Month")
    except TradingRepoError as e:
        logger.exception("create_trade failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    push_update(request.user, "trade.created", trade)
    return Response(trade, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def trade_detail(request, trade_id):
    if request.method == "DELETE":
        try:
            repository.delete_trade(request.user, trade_id)
        except ObjectDoesNotExist:
            return _not_found("Trade")
        except TradingRepoError as e:
            logger.exception("delete_trade failed")
            return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

        push_update(request.user, "trade.deleted", {"id": str(trade_id)})
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = TradeUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        trade = repository.update_trade(request.user, trade_id, serializer.validated_data)
    except ObjectDoesNotExist:
        return _not_found("Trade")
    except TradingRepoError as e:
        logger.exception("update_trade failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    push_update(request.user, "trade.updated", trade)
    return Response(trade)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def open_trade(request, trade_id):
    try:
        trade = repository.open_trade(request.user, trade_id)
    except ObjectDoesNotExist:
        return _not_found("Trade")
    except TradeTransitionError as e:
        return Response(
            {"error": e.message, "missing": e.missing},
            status=status.HTTP_400_BAD_REQUEST
        )
    except TradingRepoError as e:
        logger.exception("open_trade failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    push_update(request.user, "trade.opened", trade)
    return Response(trade)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def close_trade(request, trade_id):
    serializer = TradeCloseSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        trade = repository.close_trade(
            request.user,
            trade_id,
            serializer.validated_data["result"],
            serializer.validated_data["final_rr"],
        )
    except ObjectDoesNotExist:
        return _not_found("Trade")
    except TradeTransitionError as e:
        return Response(
            {"error": e.message, "missing": e.missing},
            status=status.HTTP_400_BAD_REQUEST
        )
    except TradingRepoError as e:
        logger.exception("close_trade failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    push_update(request.user, "trade.closed", trade)
    return Response(trade)
