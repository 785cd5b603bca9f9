"""Business logic services."""

from .base import BaseService, UploadedFile
from .job_service import JobService
from .application_service import ApplicationService
from .candidate_profile_service import CandidateProfileService
from .employer_profile_service import EmployerProfileService
from .saved_job_service import SavedJobService
from .search_history_service import SearchHistoryService
from .status_service import StatusService
