from portal.models.base import Base  # noqa: F401

from portal.models.agency import Agency  # noqa: F401
from portal.models.user import User  # noqa: F401
from portal.models.api_key import ApiKey  # noqa: F401
from portal.models.listing import Property, Project  # noqa: F401
from portal.models.floor import Floor, Quadrant  # noqa: F401
from portal.models.audit_log import AuditLog  # noqa: F401
