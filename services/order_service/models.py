from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from shared.config.database import Base
from services.product_service.models import Product


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(16), nullable=False, unique=True, index=True) # external id, e.g. ORD1A2B3C4D
    customer_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default="PLACED")

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # No cascade: a product that has been ordered cannot be deleted.
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False) # price * quantity at order time

    order = relationship("Order", back_populates="items")
    product = relationship(Product, lazy="joined")
