"""Prescription upload and the customer's own prescriptions."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.permissions import require_auth
from medora.core.security import TokenPayload
from medora.models.prescription import Prescription
from medora.schemas.prescription import PrescriptionCreate, PrescriptionList, PrescriptionResponse

router = APIRouter()


@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
def upload_prescription(
    data: PrescriptionCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Image is stored as given (URL or base64 data URI); review starts as PENDING."""
    user = require_auth(claims)
    prescription = Prescription(user_id=user.user_id, **data.model_dump())
    db.add(prescription)
    db.commit()
    db.refresh(prescription)
    return prescription


@router.get("", response_model=PrescriptionList)
def list_my_prescriptions(
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    user = require_auth(claims)
    prescriptions = (
        db.query(Prescription)
        .filter(Prescription.user_id == user.user_id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .all()
    )
    return PrescriptionList(prescriptions=prescriptions)
