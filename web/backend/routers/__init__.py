"""API route handlers."""

from .jobs import router as jobs_router
from .applications import router as applications_router
from .candidates import router as candidates_router
from .profiles import router as profiles_router
from .employers import router as employers_router
from .saved_jobs import router as saved_jobs_router
from .search_history import router as search_history_router
from .statuses import router as statuses_router
