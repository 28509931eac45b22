import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Provide a safe development fallback so the CLI works without a .env file.
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-me'
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///schoolleague.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tier assigned to schools created without an explicit tier
    DEFAULT_SCHOOL_TIER = os.getenv('DEFAULT_SCHOOL_TIER', 'beginner')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    DEFAULT_SCHOOL_TIER = 'beginner'
