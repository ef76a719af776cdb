"""
Dashboard stats for the back office.

Provides:
- Overview counters (orders, revenue, users, medicines, pending prescriptions, low stock)
- The 10 most recent orders
- The 10 medicines with the most order lines
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.config import settings
from medora.core.permissions import STAFF_ROLES, require_role
from medora.core.security import TokenPayload
from medora.models.catalog import Category
from medora.models.enums import PaymentStatus, PrescriptionStatus
from medora.models.medicine import Medicine
from medora.models.order import Order, OrderItem
from medora.models.prescription import Prescription
from medora.models.user import User
from medora.schemas.stats import StatsOverview, StatsResponse, TopMedicine

router = APIRouter()

RECENT_ORDERS = 10
TOP_MEDICINES = 10


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)

    total_orders = db.query(func.count(Order.id)).scalar() or 0

    # Revenue only counts orders whose payment went through
    total_revenue = db.query(func.sum(Order.total)).filter(
        Order.payment_status == PaymentStatus.COMPLETED
    ).scalar() or 0.0

    total_users = db.query(func.count(User.id)).scalar() or 0

    total_medicines = db.query(func.count(Medicine.id)).filter(
        Medicine.active.is_(True)
    ).scalar() or 0

    pending_prescriptions = db.query(func.count(Prescription.id)).filter(
        Prescription.status == PrescriptionStatus.PENDING
    ).scalar() or 0

    low_stock = db.query(func.count(Medicine.id)).filter(
        Medicine.active.is_(True),
        Medicine.stock < settings.LOW_STOCK_THRESHOLD,
    ).scalar() or 0

    recent_orders = (
        db.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS)
        .all()
    )

    item_count = func.count(OrderItem.id).label("order_item_count")
    top_rows = (
        db.query(Medicine, Category.name, item_count)
        .join(OrderItem, OrderItem.medicine_id == Medicine.id)
        .outerjoin(Category, Medicine.category_id == Category.id)
        .group_by(Medicine.id, Category.name)
        .order_by(item_count.desc(), Medicine.id.asc())
        .limit(TOP_MEDICINES)
        .all()
    )
    top_medicines = [
        TopMedicine(
            id=medicine.id,
            name=medicine.name,
            slug=medicine.slug,
            stock=medicine.stock,
            category_name=category_name,
            order_item_count=count,
        )
        for medicine, category_name, count in top_rows
    ]

    return StatsResponse(
        overview=StatsOverview(
            total_orders=total_orders,
            total_revenue=float(total_revenue),
            total_users=total_users,
            total_medicines=total_medicines,
            pending_prescriptions=pending_prescriptions,
            low_stock_medicines=low_stock,
        ),
        recent_orders=recent_orders,
        top_medicines=top_medicines,
    )
