"""Shared pytest fixtures."""

import pytest

from hospital_admin.auth_store import AuthStore
from hospital_admin.storage import LocalStorage
from hospital_admin.store.hospital_store import HospitalStore
from hospital_admin.store.user_directory import UserDirectory


@pytest.fixture
def storage(tmp_path):
    """Fresh SQLite-backed storage per test."""
    return LocalStorage(tmp_path / "test.db")


@pytest.fixture
def store(storage):
    """Store preloaded with the demo records."""
    return HospitalStore(storage, seed_data=True)


@pytest.fixture
def empty_store(storage):
    return HospitalStore(storage)


@pytest.fixture
def directory(storage):
    return UserDirectory(storage)


@pytest.fixture
def auth(storage, directory):
    """Auth store in local demo mode (no remote client)."""
    return AuthStore(storage, directory)


@pytest.fixture
def patient(store):
    """A patient created through the validating command."""
    result = store.create_patient({
        "first_name": "Anna",
        "last_name": "Weber",
        "date_of_birth": "1985-04-12",
        "gender": "female",
        "contact_number": "+49 170 1234567",
    })
    assert result.success, result.error
    return result.value
