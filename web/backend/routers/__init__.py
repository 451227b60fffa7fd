"""API route handlers."""

from .assessment import router as assessment_router
from .matches import router as matches_router
from .notifications import router as notifications_router
