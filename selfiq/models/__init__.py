# Import every model so Base.metadata is complete for create_all / Alembic.
from selfiq.models.user import User  # noqa: F401
from selfiq.models.assessment_progress import AssessmentProgress  # noqa: F401
from selfiq.models.assessment_record import AssessmentRecord  # noqa: F401
from selfiq.models.access_grant import AccessGrant  # noqa: F401
