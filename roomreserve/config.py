import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///roomreserve.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Business Rules Defaults
    OPERATING_HOURS_PER_DAY = int(os.environ.get('OPERATING_HOURS_PER_DAY', 12))
    DEFAULT_RESERVATION_STATUS = os.environ.get('DEFAULT_RESERVATION_STATUS', 'confirmed')
    POPULAR_ROOMS_LIMIT = int(os.environ.get('POPULAR_ROOMS_LIMIT', 5))

class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
