import pytest

from conftest import make_field
from labreports.services.status_calculator import calculate_status, completion_summary

REQUIRED = ['blood_group', 'rh_factor']


def test_no_values_is_pending():
    assert calculate_status({}, REQUIRED) == 'pending'
    assert calculate_status({}, []) == 'pending'


def test_all_required_filled_is_completed():
    assert calculate_status({'blood_group': 'A', 'rh_factor': 'POSITIVE'}, REQUIRED) == 'completed'


@pytest.mark.parametrize('values', [
    {'blood_group': 'A'},
    {'blood_group': 'A', 'rh_factor': ''},
    {'blood_group': 'A', 'rh_factor': None},
    {'other': 'x'},
])
def test_missing_required_is_in_progress(values):
    assert calculate_status(values, REQUIRED) == 'in-progress'


def test_keys_with_only_empty_values_are_not_pending():
    # any key at all moves the report out of pending
    assert calculate_status({'blood_group': None}, REQUIRED) == 'in-progress'


def test_zero_counts_as_filled():
    assert calculate_status({'basophil': 0}, ['basophil']) == 'completed'


def test_empty_required_set_completes_on_any_value():
    assert calculate_status({'note': 'anything'}, []) == 'completed'


def test_status_is_deterministic():
    values = {'blood_group': 'B'}
    results = {calculate_status(values, REQUIRED) for _ in range(5)}
    assert results == {'in-progress'}
    assert values == {'blood_group': 'B'}


def test_completion_summary():
    fields = [
        make_field('a', is_required=True),
        make_field('b', is_required=True),
        make_field('c'),
    ]

    assert completion_summary(fields, {'a': 'x', 'c': 'y'}) == {
        'filled_count': 1, 'total_required': 2, 'percent_complete': 50
    }
    assert completion_summary([make_field('c')], {}) == {
        'filled_count': 0, 'total_required': 0, 'percent_complete': 100
    }


def test_whitespace_counts_for_status_but_not_for_progress():
    fields = [make_field('hb', 'Hb', 'number', True)]
    values = {'hb': '   '}

    assert calculate_status(values, ['hb']) == 'completed'
    assert completion_summary(fields, values)['filled_count'] == 0
