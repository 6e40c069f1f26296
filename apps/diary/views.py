# ===== apps/diary/views.py =====

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from django.core.exceptions import ObjectDoesNotExist

import logging

from apps.trading.quarters import is_valid_quarter

from . import repository
from .repository import DiaryRepoError, is_locked
from .serializers import (
    DiaryNoteCreateSerializer,
    DiaryNoteSerializer,
    QuarterReflectionSerializer,
)

logger = logging.getLogger(__name__)

LOCKED = {"error": "Quarter is locked"}


def _bad_quarter(quarter):
    return Response({"error": f"Invalid quarter: {quarter}"}, status=status.HTTP_400_BAD_REQUEST)


# ============================================================
# QUARTER BUNDLE
# ============================================================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def get_diary(request, year, quarter):
    if not is_valid_quarter(quarter):
        return _bad_quarter(quarter)

    try:
        return Response(repository.load_diary_bundle(request.user, year, quarter))
    except DiaryRepoError as e:
        return Response({"error": e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================================
# NOTES
# ============================================================

@api_view(["POST"])
@permission_classes([IsAuthenticated])
def create_note(request, year, quarter):
    if not is_valid_quarter(quarter):
        return _bad_quarter(quarter)
    if is_locked(year):
        return Response(LOCKED, status=status.HTTP_403_FORBIDDEN)

    serializer = DiaryNoteCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        note = repository.create_note(request.user, year, quarter, serializer.validated_data)
    except DiaryRepoError as e:
        logger.exception("create_note failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    return Response(note, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def note_detail(request, note_id):
    try:
        note = repository.get_note(request.user, note_id)
        if is_locked(note.diary_quarter.year):
            return Response(LOCKED, status=status.HTTP_403_FORBIDDEN)

        if request.method == "DELETE":
            repository.delete_note(request.user, note_id)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = DiaryNoteSerializer(note, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        return Response(repository.update_note(request.user, note_id, serializer.validated_data))

    except ObjectDoesNotExist:
        return Response({"error": "Note not found"}, status=status.HTTP_404_NOT_FOUND)

    except DiaryRepoError as e:
        logger.exception("note write failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)


# ============================================================
# REFLECTION
# ============================================================

@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def put_reflection(request, year, quarter):
    if not is_valid_quarter(quarter):
        return _bad_quarter(quarter)
    if is_locked(year):
        return Response(LOCKED, status=status.HTTP_403_FORBIDDEN)

    serializer = QuarterReflectionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        reflection = repository.upsert_reflection(
            request.user, year, quarter, serializer.validated_data
        )
    except DiaryRepoError as e:
        logger.exception("put_reflection failed")
        return Response({"error": e.message}, status=status.HTTP_400_BAD_REQUEST)

    return Response(reflection)
