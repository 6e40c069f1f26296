# apps/diary/repository.py
"""Diary store: notes per month and one reflection per quarter."""
import logging

from django.db import transaction

from apps.trading.quarters import current_year, is_valid_quarter, quarter_months
from apps.users.errors import RepoError, require_user, store_errors

from .models import DiaryNote, DiaryQuarter, QuarterReflection
from .serializers import DiaryNoteSerializer, QuarterReflectionSerializer

logger = logging.getLogger(__name__)


class DiaryRepoError(RepoError):
    pass


def is_locked(year, today=None) -> bool:
    """Quarters of past years are read-only."""
    return year < current_year(today)


def ensure_diary_quarter(user, year, quarter):
    require_user(user, DiaryRepoError)
    if not is_valid_quarter(quarter):
        raise DiaryRepoError(f"Invalid quarter: {quarter}")

    with store_errors(DiaryRepoError, "Ensure diary quarter"):
        diary_quarter, created = DiaryQuarter.objects.get_or_create(
            user=user, year=year, quarter=quarter
        )
    if created:
        logger.info(f"Created diary quarter {year} Q{quarter} for {user}")
    return diary_quarter


def _reflection_data(diary_quarter, reflection, today=None):
    data = dict(QuarterReflectionSerializer(reflection).data)
    data.update({
        "year": diary_quarter.year,
        "quarter": diary_quarter.quarter,
        "is_locked": is_locked(diary_quarter.year, today),
    })
    return data


def load_diary_bundle(user, year, quarter, today=None):
    """
    Notes of the quarter grouped into its three months (newest first) and
    the reflection, if any.
    """
    diary_quarter = ensure_diary_quarter(user, year, quarter)
    names = quarter_months(quarter)

    with store_errors(DiaryRepoError, f"Load diary {year} Q{quarter}"):
        notes = list(diary_quarter.notes.order_by("-created_at"))
        reflection = QuarterReflection.objects.filter(diary_quarter=diary_quarter).first()

    by_month = {name: [] for name in names}
    for note in notes:
        if note.month_name in by_month:
            by_month[note.month_name].append(DiaryNoteSerializer(note).data)

    return {
        "id": str(diary_quarter.id),
        "year": diary_quarter.year,
        "quarter": diary_quarter.quarter,
        "is_locked": is_locked(diary_quarter.year, today),
        "months": [{"month": name, "notes": by_month[name]} for name in names],
        "reflection": (
            _reflection_data(diary_quarter, reflection, today) if reflection else None
        ),
    }


def create_note(user, year, quarter, data):
    """``data`` holds validated model fields (month_name, emoji, tags, content)."""
    diary_quarter = ensure_diary_quarter(user, year, quarter)
    if data["month_name"] not in quarter_months(quarter):
        raise DiaryRepoError(f"{data['month_name']} is not part of Q{quarter}")

    with store_errors(DiaryRepoError, "Create diary note"):
        note = DiaryNote.objects.create(diary_quarter=diary_quarter, **data)
    return DiaryNoteSerializer(note).data


def get_note(user, note_id):
    require_user(user, DiaryRepoError)
    with store_errors(DiaryRepoError, "Get diary note"):
        return DiaryNote.objects.select_related("diary_quarter").get(
            id=note_id, diary_quarter__user=user
        )


def update_note(user, note_id, data):
    note = get_note(user, note_id)

    with store_errors(DiaryRepoError, "Update diary note"):
        for field in ("emoji", "tags", "content"):
            if field in data:
                setattr(note, field, data[field])
        note.save()
    return DiaryNoteSerializer(note).data


def delete_note(user, note_id):
    note = get_note(user, note_id)
    with store_errors(DiaryRepoError, "Delete diary note"):
        note.delete()


def upsert_reflection(user, year, quarter, data, today=None):
    diary_quarter = ensure_diary_quarter(user, year, quarter)

    with store_errors(DiaryRepoError, "Upsert reflection"):
        with transaction.atomic():
            reflection, _ = QuarterReflection.objects.update_or_create(
                diary_quarter=diary_quarter,
                defaults={
                    "emoji": data.get("emoji"),
                    "content": data.get("content", ""),
                },
            )
    return _reflection_data(diary_quarter, reflection, today)
