from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.job import JobRepository
from database.repositories.application import ApplicationRepository
from database.repositories.profile import CandidateProfileRepository, EmployerProfileRepository
from database.repositories.saved import SavedJobRepository, SavedCandidateRepository
from database.repositories.search_history import SearchHistoryRepository
from database.repositories.status import StatusRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'JobRepository',
    'ApplicationRepository',
    'CandidateProfileRepository',
    'EmployerProfileRepository',
    'SavedJobRepository',
    'SavedCandidateRepository',
    'SearchHistoryRepository',
    'StatusRepository',
]
