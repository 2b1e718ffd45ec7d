# models/__init__.py
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models
from .service_entry import ServiceEntry, ServiceNetworkCode
from .change_request import ChangeRequest, ChangeStatus
from .catalog_version import CatalogVersion
from .audit_log import AuditLog
