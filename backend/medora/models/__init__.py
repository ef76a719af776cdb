from medora.models.enums import Role, OrderStatus, PaymentStatus, PrescriptionStatus
from medora.models.user import User
from medora.models.refresh_token import RefreshToken
from medora.models.catalog import Category, Brand
from medora.models.medicine import Medicine
from medora.models.order import Order, OrderItem
from medora.models.prescription import Prescription
from medora.models.review import Review

__all__ = [
    "Role", "OrderStatus", "PaymentStatus", "PrescriptionStatus",
    "User", "RefreshToken", "Category", "Brand", "Medicine",
    "Order", "OrderItem", "Prescription", "Review",
]
