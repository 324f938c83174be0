import pytest
from flask_jwt_extended import create_access_token

from labreports import create_app
from labreports.extensions import db
from labreports.models import ReportType, TestAssignment
from labreports.seeds import add_report_type, seed_report_types
from labreports.services.value_mapper import FieldDefinition


URINE_TYPE = {
    "code": "URINE",
    "name": "Urine Routine",
    "fields": [
        {"field_name": "ph", "field_label": "pH", "field_type": "number", "field_order": 1,
         "is_required": True, "normal_range_min": 4.5, "normal_range_max": 8.0},
        {"field_name": "colour", "field_label": "Colour", "field_type": "dropdown", "field_order": 2,
         "is_required": False, "dropdown_options": ["Pale Yellow", "Yellow", "Red"]},
        {"field_name": "remarks", "field_label": "Remarks", "field_type": "textarea", "field_order": 3,
         "is_required": False},
    ],
}

NOTES_TYPE = {
    "code": "NOTES",
    "name": "Free Notes",
    "fields": [
        {"field_name": "note", "field_label": "Note", "field_type": "text", "field_order": 1,
         "is_required": False},
    ],
}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        seed_report_types()
        add_report_type(URINE_TYPE)
        add_report_type(NOTES_TYPE)
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    token = create_access_token(identity='tech-1')
    return {'Authorization': f'Bearer {token}'}


def _report_type(code):
    return ReportType.query.filter_by(code=code).first()


@pytest.fixture
def blood_group_type(app):
    return _report_type('BLOOD_GROUP')


@pytest.fixture
def cbc_type(app):
    return _report_type('CBC')


@pytest.fixture
def urine_type(app):
    return _report_type('URINE')


@pytest.fixture
def notes_type(app):
    return _report_type('NOTES')


@pytest.fixture
def make_assignment(app):
    def _make(test_type='BG'):
        assignment = TestAssignment(patient_id='patient-1', test_type=test_type, assigned_by='admin-1')
        db.session.add(assignment)
        db.session.commit()
        return assignment.id
    return _make


def make_field(field_name, field_label=None, field_type='text', is_required=False,
               dropdown_options=None, normal_range_min=None, normal_range_max=None,
               field_order=1, field_id=None):
    return FieldDefinition(
        id=field_id or f'id-{field_name}',
        field_name=field_name,
        field_label=field_label or field_name,
        field_type=field_type,
        field_order=field_order,
        is_required=is_required,
        normal_range_min=normal_range_min,
        normal_range_max=normal_range_max,
        dropdown_options=tuple(dropdown_options) if dropdown_options is not None else None,
    )


BLOOD_GROUP_FIELDS = [
    make_field('blood_group', 'Blood Group', 'dropdown', True, ['A', 'B', 'AB', 'O'], field_order=1),
    make_field('rh_factor', 'Rh Factor', 'dropdown', True, ['POSITIVE', 'NEGATIVE'], field_order=2),
]
