from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..core.db import Base

class InboundEvent(Base):
    __tablename__ = "InboundEvent"

    EventID   = Column(Integer,     primary_key=True, autoincrement=True)
    ReceiptID = Column(String(36),  ForeignKey("InboundReceipt.ReceiptID"), nullable=False, index=True)
    EventType = Column(String(30),  nullable=False)
    Payload   = Column(Text)        # JSON
    ActorID   = Column(String(100))
    CreatedAt = Column(DateTime,    nullable=False, server_default=func.current_timestamp())

    receipt = relationship("InboundReceipt", back_populates="events")
