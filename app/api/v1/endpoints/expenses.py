from typing import List
from fastapi import APIRouter, Depends, Response, status
from app.api.deps import get_expense_service
from app.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from app.services.expense_service import ExpenseService

router = APIRouter()


@router.post("/", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_in: ExpenseCreate,
    service: ExpenseService = Depends(get_expense_service)
):
    """Record an expense and recompute the group's debts"""
    expense = await service.create_expense(expense_in)
    return ExpenseResponse.model_validate(expense)


@router.get("/group/{group_id}", response_model=List[ExpenseResponse])
async def list_group_expenses(
    group_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    """Expenses of a group with their splits, newest first"""
    expenses = await service.list_group_expenses(group_id)
    return [ExpenseResponse.model_validate(expense) for expense in expenses]


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    expense = await service.get_expense(expense_id)
    return ExpenseResponse.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    expense_in: ExpenseUpdate,
    service: ExpenseService = Depends(get_expense_service)
):
    """Replace an expense and its splits, then recompute the group's debts"""
    expense = await service.update_expense(expense_id, expense_in)
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    await service.delete_expense(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
