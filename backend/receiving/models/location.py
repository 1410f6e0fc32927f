from sqlalchemy import Column, String, CheckConstraint, text
from ..core.db import Base

class Location(Base):
    __tablename__ = "Location"

    LocationID = Column(String(36),  primary_key=True)
    OrgID      = Column(String(36),  nullable=False, index=True)
    Code       = Column(String(50),  nullable=False)
    Type_s     = Column(String(20),  nullable=False)
    Status_s   = Column(String(20),  nullable=False, server_default=text("'ACTIVE'"))

    __table_args__ = (
        CheckConstraint("Status_s IN ('ACTIVE','INACTIVE')", name="CK_Location_Status"),
    )
