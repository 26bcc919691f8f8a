# rx_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from rx_core.common.permissions import ROLE_ADMIN, ROLE_PHARMACIST, ROLE_SCHEDULER
from rx_core.pharmacies.models import Pharmacist, PharmacistSpecialty, Pharmacy, Specialty


def _user_with_role(username, role):
    User = get_user_model()
    user = User.objects.create_user(username=username, password="testpass", is_active=True)
    group, _ = Group.objects.get_or_create(name=role)
    user.groups.add(group)
    return user


@pytest.fixture
def user(db):
    """Scheduler: may read and write shifts, but not delete them."""
    return _user_with_role("scheduler", ROLE_SCHEDULER)


@pytest.fixture
def admin_user(db):
    return _user_with_role("rx-admin", ROLE_ADMIN)


@pytest.fixture
def pharmacist_user(db):
    return _user_with_role("staff", ROLE_PHARMACIST)


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def pharmacy(db):
    return Pharmacy.objects.create(code="central", name="Central Pharmacy")


@pytest.fixture
def other_pharmacy(db):
    return Pharmacy.objects.create(code="harbor", name="Harbor Pharmacy")


@pytest.fixture
def oncology(db):
    return Specialty.objects.create(code="oncology", name="Oncology")


@pytest.fixture
def make_pharmacist(db, pharmacy):
    counter = {"n": 0}

    def _make(*, first_name="Test", last_name=None, years=5, home=None, specialties=(), is_active=True):
        counter["n"] += 1
        p = Pharmacist.objects.create(
            first_name=first_name,
            last_name=last_name or f"Pharmacist{counter['n']:02d}",
            license_number=f"LIC-{counter['n']:04d}",
            total_experience_years=years,
            home_pharmacy=home or pharmacy,
            is_active=is_active,
        )
        for specialty in specialties:
            PharmacistSpecialty.objects.create(pharmacist=p, specialty=specialty, proficiency_level=3)
        return p

    return _make
