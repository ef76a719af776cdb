"""Public brand list."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medora.api.deps import get_db
from medora.models.catalog import Brand
from medora.schemas.catalog import BrandList

router = APIRouter()


@router.get("", response_model=BrandList)
def list_brands(db: Session = Depends(get_db)):
    return BrandList(brands=db.query(Brand).order_by(Brand.name).all())
