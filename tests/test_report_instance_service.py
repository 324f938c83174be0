import uuid

import pytest
from sqlalchemy.exc import OperationalError

from labreports.errors import NotFoundError, ReportValidationError, StorageError
from labreports.extensions import db
from labreports.models import ReportInstance, ReportValue
from labreports.services import report_instance_service
from labreports.services.field_store import (
    get_fields_for_report_type,
    get_report_definition,
)
from labreports.services.report_instance_service import get_report_data, save_report


def stored_rows(instance_id):
    rows = ReportValue.query.filter_by(report_instance_id=instance_id).all()
    return sorted((row.report_field_id, row.value_text, row.value_number) for row in rows)


def field_id(report_type, name):
    return next(field.id for field in report_type.fields if field.field_name == name)


def test_first_save_creates_completed_instance(blood_group_type, make_assignment):
    assignment_id = make_assignment()

    result = save_report(assignment_id, blood_group_type.id,
                         {'blood_group': 'A', 'rh_factor': 'POSITIVE'}, created_by='tech-1')

    assert result.operation == 'created'
    instance = result.instance
    assert instance.status == 'completed'
    assert instance.completed_at is not None
    assert instance.created_by == 'tech-1'
    assert instance.test_assignment_id == assignment_id
    assert len(stored_rows(instance.id)) == 2


def test_validation_failure_writes_nothing(blood_group_type, make_assignment):
    assignment_id = make_assignment()

    with pytest.raises(ReportValidationError) as exc_info:
        save_report(assignment_id, blood_group_type.id, {'blood_group': 'Z'})

    messages = [error.message for error in exc_info.value.errors]
    assert messages == ['Blood Group must be one of: A, B, AB, O', 'Rh Factor is required']
    assert exc_info.value.values == {'blood_group': 'Z'}
    assert ReportInstance.query.count() == 0
    assert ReportValue.query.count() == 0


def test_numeric_value_stored_in_number_column(cbc_type, make_assignment):
    assignment_id = make_assignment('CBC')
    values = {field.field_name: '5' for field in cbc_type.fields if field.is_required}
    values['hb'] = '15.5'

    result = save_report(assignment_id, cbc_type.id, values)

    row = ReportValue.query.filter_by(
        report_instance_id=result.instance.id, report_field_id=field_id(cbc_type, 'hb')
    ).one()
    assert row.value_number == 15.5
    assert row.value_text is None


def test_second_save_updates_and_replaces_rows(urine_type, make_assignment):
    assignment_id = make_assignment('URINE')

    first = save_report(assignment_id, urine_type.id, {'ph': '6', 'colour': 'Yellow', 'remarks': 'clear'})
    assert first.operation == 'created'
    first_id = first.instance.id

    second = save_report(assignment_id, urine_type.id, {'ph': '6.5', 'colour': ''})

    assert second.operation == 'updated'
    assert second.instance.id == first_id
    assert ReportInstance.query.count() == 1
    assert stored_rows(first_id) == [(field_id(urine_type, 'ph'), None, 6.5)]


def test_saving_identical_values_is_idempotent(urine_type, make_assignment):
    assignment_id = make_assignment('URINE')
    values = {'ph': 7, 'remarks': 'trace protein'}

    first = save_report(assignment_id, urine_type.id, values)
    rows_after_first = stored_rows(first.instance.id)
    second = save_report(assignment_id, urine_type.id, values)

    assert second.operation == 'updated'
    assert stored_rows(second.instance.id) == rows_after_first
    assert second.instance.status == first.instance.status == 'completed'


def test_completed_at_cleared_when_no_longer_completed(notes_type, make_assignment):
    assignment_id = make_assignment('NOTES')

    completed = save_report(assignment_id, notes_type.id, {'note': 'seen'})
    assert completed.instance.status == 'completed'
    assert completed.instance.completed_at is not None

    pending = save_report(assignment_id, notes_type.id, {})
    assert pending.operation == 'updated'
    assert pending.instance.status == 'pending'
    assert pending.instance.completed_at is None
    assert stored_rows(pending.instance.id) == []


def test_missing_assignment_is_not_found(blood_group_type):
    with pytest.raises(NotFoundError):
        save_report(str(uuid.uuid4()), blood_group_type.id, {'blood_group': 'A', 'rh_factor': 'POSITIVE'})


def test_missing_report_type_is_not_found(make_assignment):
    with pytest.raises(NotFoundError):
        save_report(make_assignment(), str(uuid.uuid4()), {})
    assert ReportInstance.query.count() == 0


def test_inactive_type_rejected_when_enforced(app, blood_group_type, make_assignment):
    blood_group_type.is_active = False
    db.session.commit()
    app.config['ENFORCE_ACTIVE_REPORT_TYPES'] = True

    with pytest.raises(NotFoundError):
        save_report(make_assignment(), blood_group_type.id, {'blood_group': 'A', 'rh_factor': 'POSITIVE'})


def test_concurrent_first_insert_is_retried_as_update(urine_type, make_assignment, monkeypatch):
    assignment_id = make_assignment('URINE')
    winner = save_report(assignment_id, urine_type.id, {'ph': 5})

    real_lookup = report_instance_service.find_instance_by_assignment
    calls = []

    def stale_lookup(test_assignment_id):
        calls.append(test_assignment_id)
        # the first lookup misses the row the concurrent request just committed
        if len(calls) == 1:
            return None
        return real_lookup(test_assignment_id)

    monkeypatch.setattr(report_instance_service, 'find_instance_by_assignment', stale_lookup)

    result = save_report(assignment_id, urine_type.id, {'ph': 8, 'colour': 'Red'})

    assert len(calls) == 2
    assert result.operation == 'updated'
    assert result.instance.id == winner.instance.id
    assert ReportInstance.query.count() == 1
    assert len(stored_rows(result.instance.id)) == 2


def test_storage_failure_rolls_back_instance_update(urine_type, make_assignment, monkeypatch):
    assignment_id = make_assignment('URINE')
    first = save_report(assignment_id, urine_type.id, {'ph': 5})
    rows_before = stored_rows(first.instance.id)
    updated_before = first.instance.updated_at

    def failing_replace(instance_id, rows):
        raise OperationalError('DELETE FROM report_values', {}, Exception('disk I/O error'))

    monkeypatch.setattr(report_instance_service, 'replace_values', failing_replace)

    with pytest.raises(StorageError):
        save_report(assignment_id, urine_type.id, {'ph': 6, 'remarks': 'repeat'})

    db.session.expire_all()
    instance = ReportInstance.query.filter_by(test_assignment_id=assignment_id).one()
    assert instance.updated_at == updated_before
    assert instance.status == 'completed'
    assert stored_rows(instance.id) == rows_before


def test_get_report_data_round_trip(urine_type, make_assignment):
    assignment_id = make_assignment('URINE')
    save_report(assignment_id, urine_type.id, {'ph': '6.5', 'colour': 'Yellow', 'unknown': 'x'})

    data = get_report_data(assignment_id)

    assert data.instance.status == 'completed'
    assert data.values == {'ph': 6.5, 'colour': 'Yellow'}
    assert data.completion == {'filled_count': 1, 'total_required': 1, 'percent_complete': 100}
    assert data.out_of_range == []


def test_get_report_data_before_first_save(make_assignment):
    data = get_report_data(make_assignment())
    assert data.instance is None
    assert data.values == {}
    assert data.completion is None


def test_get_report_data_missing_assignment(app):
    with pytest.raises(NotFoundError):
        get_report_data(str(uuid.uuid4()))


def test_fields_are_ordered_and_definition_lookup(cbc_type):
    fields = get_fields_for_report_type(cbc_type.id)
    assert [field.field_order for field in fields] == list(range(1, 17))

    report_type, definition_fields = get_report_definition('BLOOD_GROUP')
    assert report_type.code == 'BLOOD_GROUP'
    assert [field.field_name for field in definition_fields] == ['blood_group', 'rh_factor']
    assert definition_fields[0].get_dropdown_options() == ['A', 'B', 'AB', 'O']

    with pytest.raises(NotFoundError):
        get_report_definition('NOPE')
    with pytest.raises(NotFoundError):
        get_fields_for_report_type(str(uuid.uuid4()))


def test_switching_report_type_keeps_instance_and_values_consistent(urine_type, notes_type, make_assignment):
    assignment_id = make_assignment('URINE')
    first = save_report(assignment_id, urine_type.id, {'ph': 6})

    second = save_report(assignment_id, notes_type.id, {'note': 'seen'})

    assert second.operation == 'updated'
    assert second.instance.id == first.instance.id
    assert second.instance.report_type_id == notes_type.id
    assert stored_rows(second.instance.id) == [(field_id(notes_type, 'note'), 'seen', None)]

    data = get_report_data(assignment_id)
    assert data.values == {'note': 'seen'}
    assert data.instance.status == 'completed'
    assert data.completion == {'filled_count': 0, 'total_required': 0, 'percent_complete': 100}


def test_rows_resolve_against_their_own_fields(urine_type, notes_type, make_assignment):
    assignment_id = make_assignment('URINE')
    result = save_report(assignment_id, urine_type.id, {'ph': 9.5})

    # instance pointing at a different type than its stored rows
    result.instance.report_type_id = notes_type.id
    db.session.commit()

    data = get_report_data(assignment_id)
    assert data.values == {'ph': 9.5}
    assert data.out_of_range == []
