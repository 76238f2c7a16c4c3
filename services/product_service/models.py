from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, LargeBinary, Text
from sqlalchemy.orm import deferred
from shared.config.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    brand = Column(String)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String)
    release_date = Column(Date)
    product_available = Column(Boolean, nullable=False, default=False)
    stock_quantity = Column(Integer, nullable=False, default=0)

    # Optional image, served raw by GET /product/{id}/image
    image_name = Column(String)
    image_type = Column(String)
    image_data = deferred(Column(LargeBinary))
