"""Checkout and the customer's own orders."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.permissions import require_auth
from medora.core.security import TokenPayload
from medora.models.enums import OrderStatus
from medora.models.order import Order
from medora.schemas.order import OrderCreate, OrderCreated, OrderList, OrderResponse
from medora.services import order_service
from medora.services.pagination import paginate

router = APIRouter()


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """
    Place an order.

    Totals are taken from the request as computed by the client.
    Stock is neither checked nor reserved.
    """
    user = require_auth(claims)
    order = order_service.create_order(db, user.user_id, data)
    return OrderCreated(order_id=order.id, order=order)


@router.get("", response_model=OrderList)
def list_my_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    user = require_auth(claims)
    q = db.query(Order).filter(Order.user_id == user.user_id)
    if order_status:
        q = q.filter(Order.status == order_status)
    orders, pagination = paginate(q.order_by(Order.created_at.desc(), Order.id.desc()), page, limit)
    return OrderList(orders=orders, pagination=pagination)


@router.get("/{order_id}", response_model=OrderResponse)
def get_my_order(
    order_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Another customer's order is reported as not found."""
    user = require_auth(claims)
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user.user_id).first()
    if not order:
        raise BusinessError.not_found("Order")
    return order
