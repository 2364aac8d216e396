from fastapi import APIRouter

from teamleave.api.block_periods import block_periods_router
from teamleave.api.capacity import capacity_router
from teamleave.api.holidays import holidays_router
from teamleave.api.leave_requests import leave_requests_router, leave_types_router
from teamleave.api.users import users_router

api_router = APIRouter()
api_router.include_router(leave_types_router)
api_router.include_router(leave_requests_router)
api_router.include_router(block_periods_router)
api_router.include_router(capacity_router)
api_router.include_router(users_router)
api_router.include_router(holidays_router)
