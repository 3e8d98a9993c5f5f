# Namespace for pipeline steps
from .migrate_companies import (  # noqa: F401
    AnalyzeCompanies,
    BackfillAttendees,
    LoadAttendeeCompanies,
    PersistStandardizedCompanies,
    StandardizeCompanies,
    ValidateMigration,
)
from .event_analytics import BuildEventAnalytics, LoadEventSnapshot  # noqa: F401
