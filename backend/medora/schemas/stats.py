from typing import List, Optional

from medora.schemas.common import CamelModel
from medora.schemas.refs import OrderSummary, UserRef


class StatsOverview(CamelModel):
    total_orders: int
    total_revenue: float
    total_users: int
    total_medicines: int
    pending_prescriptions: int
    low_stock_medicines: int


class RecentOrder(OrderSummary):
    user: Optional[UserRef] = None


class TopMedicine(CamelModel):
    id: int
    name: str
    slug: str
    stock: int
    category_name: Optional[str] = None
    order_item_count: int


class StatsResponse(CamelModel):
    overview: StatsOverview
    recent_orders: List[RecentOrder]
    top_medicines: List[TopMedicine]
