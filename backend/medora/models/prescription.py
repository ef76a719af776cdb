"""
Prescription: uploaded by a customer, reviewed by a pharmacist or admin.
Status flow: PENDING -> APPROVED / REJECTED. Approval records who approved and when.
"""
from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medora.db.base import Base
from medora.models.enums import PrescriptionStatus


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    image = Column(Text, nullable=False)  # URL or base64 data URI
    patient_name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    status = Column(SAEnum(PrescriptionStatus), nullable=False, default=PrescriptionStatus.PENDING)
    notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="prescriptions", foreign_keys=[user_id])
    orders = relationship("Order", back_populates="prescription")
