# backend/factory_tracker/models/order.py
"""Local orders and order lines.

Orders imported from NetSim carry ``external_id = "NETSIM-<order no>"`` and
their lines ``external_id = "NETSIM-DETAY-<line no>"``. The external id is
indexed but deliberately not unique; the import routine checks for an
existing header before creating one.
"""

from datetime import datetime
from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from factory_tracker.core.database import Base


class OrderStatus:
    PLANNED = "PLANNED"
    IN_PRODUCTION = "IN_PRODUCTION"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ProductStatus:
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_date: Mapped[datetime | None] = mapped_column(nullable=True)
    delivery_date: Mapped[datetime | None] = mapped_column(nullable=True)
    total_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(10), default="TL", nullable=False)
    status: Mapped[str] = mapped_column(String(30), default=OrderStatus.PLANNED, nullable=False)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    products: Mapped[list["OrderProduct"]] = relationship(
        "OrderProduct",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderProduct.sort_order",
    )


class OrderProduct(Base):
    """One line of an order, moving through the planning workflow."""
    __tablename__ = "order_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)  # stock code or STOK-<no>
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    note1: Mapped[str | None] = mapped_column(Text, nullable=True)
    note2: Mapped[str | None] = mapped_column(Text, nullable=True)
    note3: Mapped[str | None] = mapped_column(Text, nullable=True)
    note4: Mapped[str | None] = mapped_column(Text, nullable=True)
    produced_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), default="Adet", nullable=False)
    unit_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(30), default=ProductStatus.DRAFT, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    external_id: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    system_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    order: Mapped["Order"] = relationship("Order", back_populates="products")
