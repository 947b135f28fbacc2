"""
Owner API endpoints.
"""

from fastapi import APIRouter, Depends, status

from ledger_service.api.deps import get_unit_of_work
from ledger_service.schemas.account import OwnerCreate, OwnerResponse
from ledger_service.services.unit_of_work import UnitOfWork

router = APIRouter(prefix="/owners", tags=["Owners"])


@router.post("/", response_model=OwnerResponse, status_code=status.HTTP_201_CREATED)
def create_owner(
    owner_data: OwnerCreate,
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Register an account owner.

    - **name**: Owner name
    - **email**: Unique contact email
    """
    owner = uow.accounts.create_owner(name=owner_data.name, email=owner_data.email)
    uow.commit()
    return owner
