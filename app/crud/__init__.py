# app/crud/__init__.py

from .crud_activity import activity
from .crud_session import session
from .crud_enrollment import enrollment
