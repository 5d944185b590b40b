from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayplan.core.db import get_db
from dayplan.dependencies.auth import get_current_user
from dayplan.schemas.usage import UsageSummary
from dayplan.services.usage_service import get_usage_summary

router = APIRouter()


@router.get("/usage", response_model=UsageSummary)
def read_usage(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_usage_summary(user["id"], db)
