from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import bcrypt

# Application-wide extension instances

db = SQLAlchemy()
migrate = Migrate()

__all__ = [
    "db",
    "migrate",
    "bcrypt",
]
