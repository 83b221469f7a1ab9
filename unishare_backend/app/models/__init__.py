from app.models.document import Document, DocumentStatus  # noqa: F401
from app.models.log import Log, LogAction  # noqa: F401
from app.models.major import Major, major_subjects  # noqa: F401
from app.models.platform_stats import PlatformStats  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.user import User, UserRole, UserStatus  # noqa: F401
