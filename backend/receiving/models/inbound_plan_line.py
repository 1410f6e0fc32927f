from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from ..core.db import Base

class InboundPlanLine(Base):
    __tablename__ = "InboundPlanLine"

    PlanLineID  = Column(String(36), primary_key=True)
    ReceiptID   = Column(String(36), ForeignKey("InboundReceipt.ReceiptID"), nullable=False, index=True)
    ProductID   = Column(String(36), ForeignKey("Product.ProductID"),        nullable=False)
    ExpectedQty = Column(Integer,    nullable=False)
    SortOrder   = Column(Integer,    nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("ExpectedQty >= 0", name="CK_InboundPlanLine_ExpectedQty"),
    )

    receipt = relationship("InboundReceipt", back_populates="plan_lines")
    product = relationship("Product")
