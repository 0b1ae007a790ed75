from fastapi import APIRouter
from app.api.v1.endpoints import groups, expenses, participants, debts, payments

api_router = APIRouter()

api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(participants.router, prefix="/participants", tags=["participants"])
api_router.include_router(debts.router, prefix="/debts", tags=["debts"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
