from .base import Base, JSONType, UTCDateTime
from .user import User
from .job import Job
from .application import Application, ApplicationStatusEvent, ApplicationNote
from .profile import CandidateProfile, EmployerProfile
from .saved import SavedJob, SavedCandidate
from .search_history import SearchHistory
from .status import PipelineStatus

__all__ = [
    'Base',
    'JSONType',
    'UTCDateTime',
    'User',
    'Job',
    'Application',
    'ApplicationStatusEvent',
    'ApplicationNote',
    'CandidateProfile',
    'EmployerProfile',
    'SavedJob',
    'SavedCandidate',
    'SearchHistory',
    'PipelineStatus',
]
