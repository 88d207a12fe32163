# app/models/__init__.py
# Import all models so SQLAlchemy can resolve relationships

from app.db.base_class import Base
from app.models.activity import Activity
from app.models.session import Session
from app.models.enrollment import Enrollment
