from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func, text, false
from sqlalchemy.orm import relationship
from ..core.db import Base

class InboundReceipt(Base):
    __tablename__ = "InboundReceipt"

    ReceiptID   = Column(String(36),  primary_key=True)
    OrgID       = Column(String(36),  nullable=False, index=True)
    ClientRef   = Column(String(100), nullable=False)
    ReceiptNo   = Column(String(50),  nullable=False, unique=True)
    Status_s    = Column(String(20),  nullable=False, server_default=text("'DRAFT'"))
    # optimistic concurrency counter, bumped on every line save / status write
    Version     = Column(Integer,     nullable=False, server_default=text("0"))
    HasIssue    = Column(Boolean,     nullable=False, server_default=false())
    CreatedAt   = Column(DateTime,    nullable=False, server_default=func.current_timestamp())
    UpdatedAt   = Column(DateTime)
    ConfirmedAt = Column(DateTime)
    ConfirmedBy = Column(String(100))

    __table_args__ = (
        CheckConstraint(
            "Status_s IN ('DRAFT','PHOTO_REQUIRED','COUNTING','CONFIRMED','PUTAWAY_READY')",
            name="CK_InboundReceipt_Status",
        ),
        CheckConstraint("Version >= 0", name="CK_InboundReceipt_Version"),
    )

    plan_lines = relationship("InboundPlanLine",    back_populates="receipt", cascade="all, delete-orphan")
    lines      = relationship("InboundReceiptLine", back_populates="receipt", cascade="all, delete-orphan")
    slots      = relationship("InboundPhotoSlot",   back_populates="receipt", cascade="all, delete-orphan")
    photos     = relationship("InboundPhoto",       back_populates="receipt", cascade="all, delete-orphan")
    events     = relationship("InboundEvent",       back_populates="receipt", cascade="all, delete-orphan")
