from .attendee_record import AttendeeRecord
from .company_record import CompanyRecord, CompanyAlias, CompanyApaxPartner, CompanyDomain
from .event_records import AgendaItem, DiningOption, Hotel
from .logo_fetch_result import LogoFetchResult, LogoUpdateOutcome
from .analytics_result import DirectoryStats, EventAnalytics, SponsorReport
from .migration_result import MigrationResult, StandardizationPreview

__all__ = [
    "AttendeeRecord",
    "CompanyRecord",
    "CompanyAlias",
    "CompanyApaxPartner",
    "CompanyDomain",
    "AgendaItem",
    "DiningOption",
    "Hotel",
    "LogoFetchResult",
    "LogoUpdateOutcome",
    "DirectoryStats",
    "EventAnalytics",
    "SponsorReport",
    "MigrationResult",
    "StandardizationPreview",
]
