"""
Tests for unit_of_work: rollback and database error translation.
"""

import pytest
from django.db import DataError, IntegrityError, InterfaceError, OperationalError

from stockledger.exceptions import ConflictError, StoreUnavailable, ValidationError
from stockledger.models import Warehouse
from stockledger.services.uow import is_conflict, unit_of_work


pytestmark = pytest.mark.django_db


class LockTimeout(Exception):
    sqlstate = '55P03'


class TestUnitOfWork:
    """Tests for unit_of_work()."""

    def test_commits_and_yields_alias(self):
        with unit_of_work() as using:
            Warehouse.objects.using(using).create(name='Main')

        assert using == 'default'
        assert Warehouse.objects.count() == 1

    def test_rolls_back_on_error(self):
        with pytest.raises(RuntimeError):
            with unit_of_work():
                Warehouse.objects.create(name='Main')
                raise RuntimeError('boom')

        assert not Warehouse.objects.exists()

    def test_integrity_error_is_conflict(self):
        with pytest.raises(ConflictError) as exc:
            with unit_of_work():
                raise IntegrityError('UNIQUE constraint failed: stockledger_stocklevel')

        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        assert exc.value.status == 409

    @pytest.mark.parametrize('error', [
        DataError('integer out of range'),
        OverflowError('Python int too large to convert to SQLite INTEGER'),
    ])
    def test_out_of_range_value_is_validation_error(self, error):
        with pytest.raises(ValidationError) as exc:
            with unit_of_work():
                Warehouse.objects.create(name='Main')
                raise error

        assert exc.value.code == 'INVALID_PAYLOAD'
        assert exc.value.status == 400
        assert not Warehouse.objects.exists()

    def test_locked_database_is_conflict(self):
        with pytest.raises(ConflictError):
            with unit_of_work():
                raise OperationalError('database is locked')

    def test_other_operational_error_is_unavailable(self, caplog):
        with pytest.raises(StoreUnavailable) as exc:
            with unit_of_work():
                raise OperationalError('unable to open database file')

        assert exc.value.status == 503
        assert any(r.getMessage() == 'stock.uow.store_unavailable' for r in caplog.records)

    def test_interface_error_is_unavailable(self):
        with pytest.raises(StoreUnavailable):
            with unit_of_work():
                raise InterfaceError('connection already closed')


class TestIsConflict:
    """Tests for is_conflict()."""

    def test_sqlstate_from_driver_error(self):
        error = OperationalError('canceling statement')
        error.__cause__ = LockTimeout()

        assert is_conflict(error)

    @pytest.mark.parametrize('message, expected', [
        ('deadlock detected', True),
        ('could not serialize access due to concurrent update', True),
        ('server closed the connection unexpectedly', False),
    ])
    def test_message(self, message, expected):
        assert is_conflict(OperationalError(message)) is expected
