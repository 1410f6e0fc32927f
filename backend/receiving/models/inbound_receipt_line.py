from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base

class InboundReceiptLine(Base):
    __tablename__ = "InboundReceiptLine"

    ReceiptLineID = Column(Integer,    primary_key=True, autoincrement=True)
    ReceiptID     = Column(String(36), ForeignKey("InboundReceipt.ReceiptID"),   nullable=False, index=True)
    PlanLineID    = Column(String(36), ForeignKey("InboundPlanLine.PlanLineID"), nullable=False)
    ReceivedQty   = Column(Integer,    nullable=False, server_default=text("0"))
    DamagedQty    = Column(Integer,    nullable=False, server_default=text("0"))
    MissingQty    = Column(Integer,    nullable=False, server_default=text("0"))
    OtherQty      = Column(Integer,    nullable=False, server_default=text("0"))
    LocationID    = Column(String(36), ForeignKey("Location.LocationID"))
    InspectedBy   = Column(String(100))
    InspectedAt   = Column(DateTime)

    __table_args__ = (
        UniqueConstraint("ReceiptID", "PlanLineID", name="UQ_InboundReceiptLine_PlanLine"),
        CheckConstraint(
            "ReceivedQty >= 0 AND DamagedQty >= 0 AND MissingQty >= 0 AND OtherQty >= 0",
            name="CK_InboundReceiptLine_Qty_NonNegative",
        ),
    )

    receipt = relationship("InboundReceipt", back_populates="lines")
