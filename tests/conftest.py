"""Shared fixtures for the journal test suite."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture
def make_user(db):
    def _make(username="trader", password="secret123", **extra):
        return get_user_model().objects.create_user(
            username=username, password=password, **extra
        )
    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user(username="someone-else")


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def anon_client(db):
    return APIClient()
