from sqlalchemy import Column, String
from ..core.db import Base

class Product(Base):
    __tablename__ = "Product"

    ProductID = Column(String(36),  primary_key=True)
    Sku       = Column(String(100), nullable=False, unique=True)
    Barcode   = Column(String(100), index=True)
    Name      = Column(String(200), nullable=False)
