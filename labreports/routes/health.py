"""
Health check endpoints for monitoring and load balancers
"""
from flask import Blueprint, jsonify
from labreports.extensions import db
from datetime import datetime

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('', methods=['GET'])
@health_bp.route('/ping', methods=['GET'])
def health_check():
    """Basic health check - no database connection"""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': 'labreports'
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """Readiness check - includes database connection"""
    try:
        db.session.execute(db.text('SELECT 1'))
        db_status = 'connected'
    except Exception as e:
        db_status = f'error: {str(e)}'

    return jsonify({
        'status': 'ready' if db_status == 'connected' else 'not_ready',
        'database': db_status,
        'timestamp': datetime.utcnow().isoformat()
    }), 200 if db_status == 'connected' else 503
