import os
from dotenv import load_dotenv

load_dotenv()


def env_flag(name, default):
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or SECRET_KEY

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///labreports.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Report engine
    SEED_REPORT_TYPES = env_flag('SEED_REPORT_TYPES', 'true')  # seed BLOOD_GROUP / CBC when empty
    ENFORCE_ACTIVE_REPORT_TYPES = env_flag('ENFORCE_ACTIVE_REPORT_TYPES', 'false')  # reject saves against inactive types

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')

    @classmethod
    def init_app(cls, app):
        pass


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SECRET_KEY = os.getenv('SECRET_KEY')

    @classmethod
    def init_app(cls, app):
        """Ensure SECRET_KEY is set"""
        secret = app.config.get('SECRET_KEY')
        if not secret or secret == 'dev-secret-key-change-in-production':
            raise ValueError("SECRET_KEY environment variable must be set in production and must not be the default value")

    # Database connection pool for production; statement timeout bounds every save
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 3600,
        'pool_size': 20,
        'max_overflow': 40,
        'connect_args': {
            'connect_timeout': 10,
            'options': '-c statement_timeout=30000'
        }
    }

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv('TEST_DATABASE_URL', 'sqlite:///:memory:')
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length-for-hs256'
    SEED_REPORT_TYPES = False


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get configuration based on FLASK_ENV"""
    env = os.getenv('FLASK_ENV', 'development')
    return config.get(env, config['default'])
