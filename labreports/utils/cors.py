"""
CORS Configuration
Centralized CORS settings for the report API
"""
import os

CORS_CONFIG = {
    "origins": os.getenv('CORS_ORIGINS', '*'),
    "methods": ["GET", "POST", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "supports_credentials": True,
    "max_age": 86400,  # 24 hours
}


def init_cors(app):
    """
    Initialize CORS for the API routes
    """
    from flask_cors import CORS

    CORS(app,
         resources={r"/api/*": {"origins": CORS_CONFIG["origins"]}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         supports_credentials=CORS_CONFIG["supports_credentials"],
         max_age=CORS_CONFIG["max_age"])

    app.logger.info("CORS enabled for origins: %s", CORS_CONFIG["origins"])
