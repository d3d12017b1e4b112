"""Value normalization and snapshot diffing."""

from datetime import date, datetime

import pytest

from hr_backend.core.exceptions import AuditContractError
from hr_backend.models.employee import FunctionalStatus
from hr_backend.services.audit_service import audit_service, normalize_value


@pytest.mark.parametrize("value, expected", [
    (None, None),
    (True, "true"),
    (False, "false"),
    (5, "5"),
    ("5", "5"),
    (date(2024, 1, 31), "2024-01-31"),
    (datetime(2024, 1, 31, 8, 30), "2024-01-31T08:30:00"),
    (FunctionalStatus.licenca, "Licença"),
])
def test_normalize_value(value, expected):
    assert normalize_value(value) == expected


def test_diff_compares_normalized_values():
    before = {"number_of_children": 2, "admission_date": date(2020, 3, 1), "position": "Analista"}
    after = {"number_of_children": "2", "admission_date": "2020-03-01", "position": "Gerente"}
    changes = audit_service.diff_snapshots(before, after)
    assert len(changes) == 1
    assert changes[0].field == "position"
    assert changes[0].label == "Cargo"
    assert (changes[0].old_value, changes[0].new_value) == ("Analista", "Gerente")


def test_diff_ignores_timestamps():
    before = {"updated_at": datetime(2024, 1, 1), "created_at": datetime(2024, 1, 1)}
    after = {"updated_at": datetime(2024, 2, 1), "created_at": datetime(2024, 2, 1)}
    assert audit_service.diff_snapshots(before, after) == []


def test_value_cleared_to_none_is_a_change():
    changes = audit_service.diff_snapshots({"blood_type": "O+"}, {"blood_type": None})
    assert [(c.old_value, c.new_value) for c in changes] == [("O+", None)]


def test_missing_actor_is_refused():
    with pytest.raises(AuditContractError):
        audit_service.require_actor(None)
