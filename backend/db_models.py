"""
SQLAlchemy ORM models for the Restaurant Payments API.

Tables:
    customers — guests attached to orders (read-only here)
    orders    — table orders with a staff-driven status lifecycle (read-only here)
    payments  — funds received against an order
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from database import Base


class Customer(Base):
    """Restaurant guests."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    orders = relationship("Order", back_populates="customer", lazy="select")


class Order(Base):
    """
    Table orders.

    Status lifecycle: PENDING → CONFIRMED → PREPARING → READY → DELIVERED → PAID,
    or CANCELLED. Moving an order to PAID is a staff action; recording a payment
    never changes it.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_number = Column(Integer, nullable=True)
    total = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="PENDING")
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    payments = relationship("Payment", back_populates="order", lazy="select")


class Payment(Base):
    """Payments recorded against orders. Created once, never updated here."""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    method = Column(String(20), nullable=True)  # "cash" | "card" | "upi" | "netbanking" (legacy rows may differ)
    status = Column(String(20), nullable=False, default="completed")
    transaction_id = Column(String(40), nullable=True, index=True)  # traceability only, not unique
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="payments")

    __table_args__ = (
        # For stats: completed payments grouped by method
        Index("ix_payments_status_method", "status", "method"),
    )
