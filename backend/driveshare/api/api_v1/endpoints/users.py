from typing import Any

from fastapi import APIRouter, Depends

from driveshare import models, schemas
from driveshare.api import deps

router = APIRouter()

@router.get("/me", response_model=schemas.User)
def read_user_me(
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    """
    Get current user.
    """
    return current_user
