from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from catalog.models import Brick, Doctor, Product
from organization.models import Delegate
from performance.timewindow import TimeWindow
from sales.models import SalesAssignment
from visits.models import VisitAssignment


def _member(username, first_name, last_name, role, supervisor=None):
    user = get_user_model().objects.create_user(
        username=username,
        password="testpass123",
        first_name=first_name,
        last_name=last_name,
    )
    return Delegate.objects.create(
        user=user,
        first_name=first_name,
        last_name=last_name,
        role=role,
        supervisor=supervisor,
    )


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def window():
    return TimeWindow(date(2024, 3, 15))


@pytest.fixture
def director(db):
    return _member("director", "Karim", "Benali", Delegate.Role.SALES_DIRECTOR)


@pytest.fixture
def supervisor(director):
    return _member("supervisor", "Nadia", "Haddad", Delegate.Role.SUPERVISOR, director)


@pytest.fixture
def delegate(supervisor):
    return _member("delegate", "Yacine", "Mansouri", Delegate.Role.DELEGATE, supervisor)


@pytest.fixture
def other_delegate(supervisor):
    return _member("delegate2", "Sara", "Bouzid", Delegate.Role.DELEGATE, supervisor)


@pytest.fixture
def outsider(db):
    """Delegate in another, unrelated tree."""
    return _member("outsider", "Omar", "Cherif", Delegate.Role.DELEGATE)


@pytest.fixture
def brick(db):
    return Brick.objects.create(name="Alger Centre", region="Alger")


@pytest.fixture
def doctor(brick):
    return Doctor.objects.create(
        first_name="Samia",
        last_name="Rahmani",
        specialty=Doctor.Specialty.CARDIOLOGIST,
        brick=brick,
    )


@pytest.fixture
def second_doctor(brick):
    return Doctor.objects.create(first_name="Ahmed", last_name="Toumi", brick=brick)


@pytest.fixture
def product(db):
    return Product.objects.create(name="Cardiostat 10mg")


@pytest.fixture
def visit_assignment(delegate, doctor):
    return VisitAssignment.objects.create(delegate=delegate, doctor=doctor, monthly_frequency=2)


@pytest.fixture
def single_visit_assignment(delegate, second_doctor):
    return VisitAssignment.objects.create(delegate=delegate, doctor=second_doctor, monthly_frequency=1)


@pytest.fixture
def sales_assignment(delegate, product):
    return SalesAssignment.objects.create(
        delegate=delegate,
        product=product,
        year=2024,
        monthly_target=[100] * 12,
        monthly_achieved=[100, 50, 0] + [0] * 9,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def delegate_client(api_client, delegate):
    api_client.force_authenticate(user=delegate.user)
    return api_client


@pytest.fixture
def supervisor_client(supervisor):
    client = APIClient()
    client.force_authenticate(user=supervisor.user)
    return client
