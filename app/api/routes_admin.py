"""
Admin API routes for weddings - requires authentication
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.locks import forget_table_lock
from app.models import Wedding
from app.schemas.wedding import WeddingCreate, WeddingResponse, WeddingDetail
from app.services.repositories import WeddingRepo
from app.services.seating_service import SeatingService
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/weddings")
def create_wedding(
    wedding_data: WeddingCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Create a new wedding"""
    if not wedding_data.title.strip():
        raise ValidationError.for_field("title", "Title is required")

    wedding = Wedding(
        title=wedding_data.title.strip(),
        bride_name=wedding_data.bride_name,
        groom_name=wedding_data.groom_name,
        wedding_date=wedding_data.wedding_date
    )
    db.add(wedding)
    db.commit()
    db.refresh(wedding)
    logger.info(f"Created wedding {wedding.id}")

    return success_response(
        message="Wedding created successfully",
        data=WeddingResponse.model_validate(wedding).model_dump(mode="json"),
        status_code=201
    )

@router.get("/weddings/{wedding_id}")
def get_wedding_details(
    wedding_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Get wedding information with seating counts"""
    wedding = WeddingRepo.get_by_id(db, wedding_id)
    if not wedding:
        raise NotFoundError("Wedding")

    detail = WeddingDetail(
        **WeddingResponse.model_validate(wedding).model_dump(),
        **SeatingService.get_wedding_counts(db, wedding)
    )
    return success_response(
        message="Wedding details retrieved",
        data=detail.model_dump(mode="json")
    )

@router.delete("/weddings/{wedding_id}")
def delete_wedding(
    wedding_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete a wedding together with its tables and guests"""
    wedding = WeddingRepo.get_by_id(db, wedding_id)
    if not wedding:
        raise NotFoundError("Wedding")

    table_ids = [table.id for table in wedding.tables]
    db.delete(wedding)
    db.commit()
    for table_id in table_ids:
        forget_table_lock(table_id)
    logger.info(f"Deleted wedding {wedding_id}")

    return success_response(
        message="Wedding deleted successfully",
        data={"deleted_wedding_id": wedding_id}
    )
