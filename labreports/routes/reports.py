"""
Report API Routes
Report type definitions and report instance save / load
"""
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from labreports.errors import ReportEngineError, MalformedRequestError
from labreports.services.field_store import get_report_definition
from labreports.services.report_instance_service import save_report, get_report_data
import logging
import re

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')

UUID_RE = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)


def is_valid_uuid(value):
    return isinstance(value, str) and bool(UUID_RE.match(value))


def parse_save_request(data):
    """
    Check the shape of a save request body

    Returns:
        tuple: (test_assignment_id, report_type_id, values)

    Raises:
        MalformedRequestError: body is not usable
    """
    if not isinstance(data, dict):
        raise MalformedRequestError('Request body must be a JSON object')

    test_assignment_id = data.get('testAssignmentId')
    report_type_id = data.get('reportTypeId')
    if not test_assignment_id or not report_type_id:
        raise MalformedRequestError('testAssignmentId and reportTypeId are required')

    if not is_valid_uuid(test_assignment_id) or not is_valid_uuid(report_type_id):
        raise MalformedRequestError('testAssignmentId and reportTypeId must be valid UUIDs')

    values = data.get('values')
    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise MalformedRequestError('values must be an object mapping field names to values')

    return test_assignment_id.lower(), report_type_id.lower(), values


@reports_bp.route('/types/<string:report_type_code>', methods=['GET'])
@jwt_required()
def get_report_type_definition(report_type_code):
    """
    Get an active report type with its fields, ordered by field_order

    Path params:
        report_type_code: e.g. 'BLOOD_GROUP', 'CBC'
    """
    try:
        report_type, fields = get_report_definition(report_type_code)

        return jsonify({
            'success': True,
            'data': {
                'reportType': report_type.to_dict(),
                'fields': [field.to_dict() for field in fields]
            }
        })

    except ReportEngineError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error getting report type {report_type_code}: {e}", exc_info=True)
        error_msg = 'Failed to fetch report type definition' if not current_app.debug else str(e)
        return jsonify({
            'success': False,
            'error': error_msg
        }), 500


@reports_bp.route('/instances', methods=['POST'])
@jwt_required()
def save_report_instance():
    """
    Create or update the report instance of a test assignment

    Body:
        testAssignmentId: Test assignment UUID (required)
        reportTypeId: Report type UUID (required)
        values: {fieldName: value} (optional, empty saves a pending report)

    Response:
        reportInstance: saved instance
        status: 'created' or 'updated'
    """
    try:
        data = request.get_json(silent=True)
        test_assignment_id, report_type_id, values = parse_save_request(data)

        result = save_report(
            test_assignment_id,
            report_type_id,
            values,
            created_by=get_jwt_identity()
        )

        return jsonify({
            'success': True,
            'data': result.to_dict()
        }), 200

    except ReportEngineError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error saving report instance: {e}", exc_info=True)
        error_msg = 'Failed to save report. Please try again.' if not current_app.debug else str(e)
        return jsonify({
            'success': False,
            'error': error_msg
        }), 500


@reports_bp.route('/instances/<string:test_assignment_id>', methods=['GET'])
@jwt_required()
def get_report_instance(test_assignment_id):
    """
    Get the saved report of a test assignment

    Response:
        reportInstance: instance or null if nothing saved yet
        values: {fieldName: value}
        completion: filled / total required fields
        outOfRange: names of numeric fields outside their normal range
    """
    try:
        if not is_valid_uuid(test_assignment_id):
            raise MalformedRequestError('Test assignment ID must be a valid UUID')

        report_data = get_report_data(test_assignment_id.lower())

        return jsonify({
            'success': True,
            'data': report_data.to_dict()
        })

    except ReportEngineError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error getting report instance for {test_assignment_id}: {e}", exc_info=True)
        error_msg = 'Failed to fetch report instance' if not current_app.debug else str(e)
        return jsonify({
            'success': False,
            'error': error_msg
        }), 500
