# config.py
import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(basedir, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    print("Info: .env file not found. Relying on system environment variables.")


class Config:
    """Base configuration."""
    PORT = int(os.environ.get('PORT', 4001))

    # --- MongoDB Config ---
    MONGO_URI = os.environ.get('MONGO_URI') or os.environ.get('DB_URL')
    MONGO_DB_NAME = os.environ.get('MONGO_DB_NAME', 'elgaleri-db')

    # Public base URL listed under "servers" in the API docs
    API_URL = os.environ.get('API_URL', 'http://localhost:4001/')

    # --- Uploads ---
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'public', 'uploads')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_SIZE_MB', '16')) * 1024 * 1024
    GALLERY_MAX_IMAGES = 10

    BCRYPT_LOG_ROUNDS = 11
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    # The test suite injects an in-memory client; these only name the database.
    MONGO_URI = os.environ.get('TEST_MONGO_URI') or 'mongodb://localhost:27017/'
    MONGO_DB_NAME = os.environ.get('TEST_MONGO_DB_NAME') or 'test-elgaleri-db'
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


# Dictionary to access config classes by name
config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
