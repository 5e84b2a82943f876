"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from markscard.api.v1.endpoints import auth, results, students, subjects

api_router = APIRouter()

# Administrator authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# Subject catalog (public)
api_router.include_router(
    subjects.router,
    prefix="/subjects",
    tags=["Subjects"],
)

# Student self-service (seat number + date of birth)
api_router.include_router(
    results.router,
    prefix="/results",
    tags=["Results"],
)

# Student records (admin session required)
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)
