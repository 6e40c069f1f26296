"""HTTP tests for the trading diary."""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.diary.models import DiaryNote, QuarterReflection
from apps.diary.repository import is_locked
from apps.trading.quarters import current_year

pytestmark = pytest.mark.django_db


def diary_url(year=None, quarter=1):
    return f"/api/diary/{year or current_year()}/{quarter}"


class TestNoteRoundTrip:
    """
    **Property 8: Notes round-trip through the diary bundle**

    A note with tags ["Error", "Aprendizaje"] and content "X" comes back
    in its month with the same tags, in the same order.
    """

    def test_round_trip(self, api_client):
        response = api_client.post(
            f"{diary_url()}/notes",
            {"month": "Febrero", "tags": ["Error", "Aprendizaje"], "content": "X"},
            format="json",
        )
        assert response.status_code == 201

        bundle = api_client.get(diary_url()).json()
        february = bundle["months"][1]

        assert february["month"] == "Febrero"
        assert len(february["notes"]) == 1
        note = february["notes"][0]
        assert note["tags"] == ["Error", "Aprendizaje"]
        assert note["content"] == "X"
        assert note["emoji"] is None

    def test_duplicate_tags_collapse_in_order(self, api_client):
        response = api_client.post(
            f"{diary_url()}/notes",
            {"month": "Enero", "tags": ["Libre", "Error", "Libre"], "content": "y", "emoji": "💪"},
            format="json",
        )

        assert response.json()["tags"] == ["Libre", "Error"]
        assert response.json()["emoji"] == "💪"

    @pytest.mark.parametrize("payload", [
        {"month": "Enero", "tags": ["Miedo"], "content": "x"},
        {"month": "Enero", "emoji": "🙂", "content": "x"},
        {"month": "Smarch", "content": "x"},
        {"month": "Julio", "content": "x"},
    ])
    def test_invalid_notes(self, api_client, payload):
        response = api_client.post(f"{diary_url()}/notes", payload, format="json")

        assert response.status_code == 400
        assert not DiaryNote.objects.exists()


class TestDiaryBundle:

    def test_empty_quarter(self, api_client):
        bundle = api_client.get(diary_url(quarter=3)).json()

        assert [m["month"] for m in bundle["months"]] == ["Julio", "Agosto", "Septiembre"]
        assert all(m["notes"] == [] for m in bundle["months"])
        assert bundle["reflection"] is None
        assert bundle["is_locked"] is False

    def test_newest_first(self, api_client):
        for content in ("first", "second"):
            api_client.post(f"{diary_url()}/notes", {"month": "Enero", "content": content},
                            format="json")
        older = DiaryNote.objects.get(content="first")
        older.created_at = timezone.now() - timedelta(days=1)
        older.save(update_fields=["created_at"])

        notes = api_client.get(diary_url()).json()["months"][0]["notes"]
        assert [n["content"] for n in notes] == ["second", "first"]

    def test_invalid_quarter(self, api_client):
        assert api_client.get(diary_url(quarter=0)).status_code == 400

    def test_notes_are_private(self, api_client, other_user):
        api_client.post(f"{diary_url()}/notes", {"month": "Enero", "content": "mine"},
                        format="json")
        note = DiaryNote.objects.get()

        api_client.force_authenticate(user=other_user)
        assert api_client.delete(f"/api/diary/notes/{note.id}").status_code == 404
        assert api_client.get(diary_url()).json()["months"][0]["notes"] == []


class TestNoteEdits:

    def test_patch_and_delete(self, api_client):
        note = api_client.post(
            f"{diary_url()}/notes", {"month": "Marzo", "content": "draft"}, format="json"
        ).json()

        response = api_client.patch(
            f"/api/diary/notes/{note['id']}",
            {"content": "final", "tags": ["Acierto"], "emoji": ""},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["content"] == "final"
        assert response.json()["tags"] == ["Acierto"]
        assert response.json()["month"] == "Marzo"

        assert api_client.delete(f"/api/diary/notes/{note['id']}").status_code == 204
        assert api_client.delete(f"/api/diary/notes/{note['id']}").status_code == 404


class TestReflection:

    def test_upsert_keeps_single_row(self, api_client):
        url = f"{diary_url()}/reflection"

        first = api_client.put(url, {"emoji": "😌", "content": "calm"}, format="json")
        second = api_client.put(url, {"emoji": "😤", "content": "rough"}, format="json")

        assert first.status_code == 200
        assert second.json()["content"] == "rough"
        assert QuarterReflection.objects.count() == 1

        reflection = api_client.get(diary_url()).json()["reflection"]
        assert reflection["emoji"] == "😤"
        assert reflection["is_locked"] is False


class TestLocking:
    """Quarters of past years are read-only."""

    def test_is_locked(self):
        assert is_locked(current_year() - 1)
        assert not is_locked(current_year())

    def test_past_year_rejects_writes(self, api_client):
        past = current_year() - 1

        note = api_client.post(
            f"{diary_url(past)}/notes", {"month": "Enero", "content": "late"}, format="json"
        )
        reflection = api_client.put(
            f"{diary_url(past)}/reflection", {"content": "late"}, format="json"
        )

        assert note.status_code == 403
        assert note.json() == {"error": "Quarter is locked"}
        assert reflection.status_code == 403
        assert api_client.get(diary_url(past)).json()["is_locked"] is True

    def test_existing_note_in_past_year_is_frozen(self, api_client, user):
        from apps.diary.repository import ensure_diary_quarter

        diary_quarter = ensure_diary_quarter(user, current_year() - 1, 4)
        note = DiaryNote.objects.create(
            diary_quarter=diary_quarter, month_name="Octubre", content="old"
        )

        response = api_client.patch(f"/api/diary/notes/{note.id}", {"content": "new"}, format="json")

        assert response.status_code == 403
        assert DiaryNote.objects.get(id=note.id).content == "old"
