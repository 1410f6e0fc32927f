from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint, text, false
from sqlalchemy.orm import relationship
from ..core.db import Base

class InboundPhotoSlot(Base):
    __tablename__ = "InboundPhotoSlot"

    SlotID    = Column(String(36),  primary_key=True)
    ReceiptID = Column(String(36),  ForeignKey("InboundReceipt.ReceiptID"), nullable=False, index=True)
    SlotKey   = Column(String(50),  nullable=False)
    Title     = Column(String(200), nullable=False)
    Step      = Column(Integer,     nullable=False)
    MinPhotos = Column(Integer,     nullable=False, server_default=text("1"))
    MaxPhotos = Column(Integer,     nullable=False, server_default=text("1"))
    SortOrder = Column(Integer,     nullable=False, server_default=text("0"))

    __table_args__ = (
        CheckConstraint("Step IN (1,2,3)",          name="CK_InboundPhotoSlot_Step"),
        CheckConstraint("MinPhotos >= 0",           name="CK_InboundPhotoSlot_Min"),
        CheckConstraint("MaxPhotos >= 1",           name="CK_InboundPhotoSlot_Max"),
    )

    receipt = relationship("InboundReceipt", back_populates="slots")
    photos  = relationship("InboundPhoto",   back_populates="slot")


class InboundPhoto(Base):
    __tablename__ = "InboundPhoto"

    PhotoID     = Column(String(36),  primary_key=True)
    ReceiptID   = Column(String(36),  ForeignKey("InboundReceipt.ReceiptID"), nullable=False, index=True)
    SlotID      = Column(String(36),  ForeignKey("InboundPhotoSlot.SlotID"),  nullable=False, index=True)
    StoragePath = Column(String(500), nullable=False)
    Source      = Column(String(10),  nullable=False)
    MimeType    = Column(String(100))
    UploadedBy  = Column(String(100))
    UploadedAt  = Column(DateTime,    nullable=False)
    # soft delete; deleted rows stay for audit
    IsDeleted   = Column(Boolean,     nullable=False, server_default=false())

    __table_args__ = (
        CheckConstraint("Source IN ('camera','album')", name="CK_InboundPhoto_Source"),
    )

    receipt = relationship("InboundReceipt",   back_populates="photos")
    slot    = relationship("InboundPhotoSlot", back_populates="photos")
