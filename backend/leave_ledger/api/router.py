from fastapi import APIRouter

from leave_ledger.api.allocations import allocations_router
from leave_ledger.api.attendance import attendance_router
from leave_ledger.api.employees import employees_router
from leave_ledger.api.leaves import leaves_router

api_router = APIRouter()
api_router.include_router(leaves_router)
api_router.include_router(allocations_router)
api_router.include_router(attendance_router)
api_router.include_router(employees_router)
