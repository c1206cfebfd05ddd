"""API routes."""

from workforce_engine.api.routes.auth import router as auth_router
from workforce_engine.api.routes.employees import router as employees_router
from workforce_engine.api.routes.expenses import router as expenses_router
from workforce_engine.api.routes.health import router as health_router
from workforce_engine.api.routes.reports import router as reports_router
from workforce_engine.api.routes.timesheets import router as timesheets_router
from workforce_engine.api.routes.users import router as users_router

__all__ = [
    "auth_router",
    "employees_router",
    "expenses_router",
    "health_router",
    "reports_router",
    "timesheets_router",
    "users_router",
]
