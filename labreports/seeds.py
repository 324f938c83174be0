"""
Database seed data: default report types and their field schemas.
Runs on app startup when the report_types table is empty, or via `flask seed-report-types`.
"""
import logging

from labreports.extensions import db
from labreports.models import ReportType, ReportField

logger = logging.getLogger(__name__)


def _number(name, label, order, unit, low, high, range_text):
    return {
        "field_name": name, "field_label": label, "field_type": "number", "field_order": order,
        "is_required": True, "unit": unit,
        "normal_range_min": low, "normal_range_max": high, "normal_range_text": range_text,
    }


REPORT_TYPES = [
    {
        "code": "BLOOD_GROUP",
        "name": "Blood Group Test",
        "description": "Determines blood type and Rh factor",
        "fields": [
            {"field_name": "blood_group", "field_label": "Blood Group", "field_type": "dropdown",
             "field_order": 1, "is_required": True, "dropdown_options": ["A", "B", "AB", "O"]},
            {"field_name": "rh_factor", "field_label": "Rh Factor", "field_type": "dropdown",
             "field_order": 2, "is_required": True, "dropdown_options": ["POSITIVE", "NEGATIVE"]},
        ],
    },
    {
        "code": "CBC",
        "name": "Complete Blood Count",
        "description": "Comprehensive blood cell analysis",
        "fields": [
            _number("hb", "Hb (Haemoglobin)", 1, "gm/dl", 13.0, 17.0, "13-17"),
            _number("total_leukocyte_count", "Total Leukocyte Count", 2, "/Cumm.", 4000.0, 11000.0, "4000-11000"),
            _number("rbc", "RBC", 3, "mill/cumm", 4.5, 5.5, "4.5-5.5"),
            _number("pcv_haematocrit", "PCV/Haematocrit", 4, "%", 40.0, 50.0, "40-50"),
            _number("platelet_count", "Platelet Count", 5, "lakhs/cumm", 1.5, 4.5, "1.5-4.5"),
            _number("mcv", "MCV", 6, "fL", 83.0, 101.0, "83-101"),
            _number("mch", "MCH", 7, "pg", 27.0, 32.0, "27-32"),
            _number("mchc", "MCHC", 8, "g/dL", 31.5, 34.5, "31.5-34.5"),
            _number("rdw_cv", "RDW-CV", 9, "%", 11.6, 14.0, "11.6-14.0"),
            _number("neutrophil", "Neutrophil", 10, "%", 40.0, 80.0, "40-80"),
            _number("lymphocyte", "Lymphocyte", 11, "%", 20.0, 40.0, "20-40"),
            _number("monocyte", "Monocyte", 12, "%", 2.0, 10.0, "2-10"),
            _number("eosinophil", "Eosinophil", 13, "%", 1.0, 6.0, "1-6"),
            _number("basophil", "Basophil", 14, "%", 0.0, 1.0, "0-1"),
            {"field_name": "platelet_on_smear", "field_label": "Platelet on Smear", "field_type": "dropdown",
             "field_order": 15, "is_required": False, "default_value": "Adequate",
             "dropdown_options": ["Adequate", "Increased", "Decreased"]},
            {"field_name": "malarial_parasite", "field_label": "Malarial Parasite", "field_type": "dropdown",
             "field_order": 16, "is_required": False,
             "default_value": "NO MALARIAL PARASITE SEEN IN SMEAR EXAMINED",
             "dropdown_options": [
                 "NO MALARIAL PARASITE SEEN IN SMEAR EXAMINED",
                 "Plasmodium Falciparum",
                 "Plasmodium Vivax",
                 "Plasmodium Ovale",
                 "Plasmodium Malariae",
             ]},
        ],
    },
]


def add_report_type(definition):
    """Add a report type and its fields to the session (no commit)"""
    report_type = ReportType(
        code=definition["code"],
        name=definition["name"],
        description=definition.get("description"),
        is_active=definition.get("is_active", True),
    )
    for field_def in definition["fields"]:
        field_def = dict(field_def)
        options = field_def.pop("dropdown_options", None)
        field = ReportField(**field_def)
        field.set_dropdown_options(options)
        report_type.fields.append(field)
    db.session.add(report_type)
    return report_type


def seed_report_types():
    """Create default report types that do not exist yet. Returns how many were added."""
    added = 0
    for definition in REPORT_TYPES:
        if ReportType.query.filter_by(code=definition["code"]).first():
            continue
        add_report_type(definition)
        added += 1
    db.session.commit()
    if added:
        logger.info("Seeded %d default report types", added)
    return added


def seed_report_types_on_startup():
    """Startup hook: seed only when the table is empty, never block startup"""
    try:
        if ReportType.query.count() == 0:
            seed_report_types()
    except Exception as e:
        db.session.rollback()
        logger.warning("Report type seeding skipped: %s", e)
