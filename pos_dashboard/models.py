from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_dashboard.db import Base

ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# Amount columns hold the value exactly as the POS wrote it ("12.50", "7",
# sometimes garbage); pos_dashboard.aggregation.coerce_amount reads them.


class Transaction(Base):
    __tablename__ = "pos_transaction"
    __table_args__ = (
        Index("ix_transaction_type_date", "transaction_type", "transaction_date"),
    )

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    transaction_date: Mapped[DateTime] = mapped_column(DateTime, nullable=False)
    transaction_type: Mapped[str] = mapped_column(Text, nullable=False, default="Sale")
    total_amount: Mapped[str | None] = mapped_column(Text)
    tax_amount: Mapped[str | None] = mapped_column(Text)
    discount_amount: Mapped[str | None] = mapped_column(Text)
    paid_amount: Mapped[str | None] = mapped_column(Text)
    cashier_id: Mapped[str | None] = mapped_column(Text)
    cashier_name: Mapped[str | None] = mapped_column(Text)
    cashier_role: Mapped[str | None] = mapped_column(Text)
    customer_id: Mapped[str | None] = mapped_column(Text)
    customer_name: Mapped[str | None] = mapped_column(Text)
    payment_method: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    items: Mapped[list["TransactionItem"]] = relationship(
        back_populates="transaction", order_by="TransactionItem.id"
    )


class TransactionItem(Base):
    __tablename__ = "transaction_item"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    transaction_pk: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("pos_transaction.id"), nullable=False
    )
    product_id: Mapped[str | None] = mapped_column(Text)
    product_name: Mapped[str | None] = mapped_column(Text)
    quantity: Mapped[str | None] = mapped_column(Text)
    unit_price: Mapped[str | None] = mapped_column(Text)
    discount: Mapped[str | None] = mapped_column(Text)
    total: Mapped[str | None] = mapped_column(Text)

    transaction: Mapped[Transaction] = relationship(back_populates="items")


class Expense(Base):
    __tablename__ = "expense"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    date: Mapped[DateTime | None] = mapped_column(DateTime)
    created_at: Mapped[DateTime | None] = mapped_column(DateTime)
    amount: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)


class Drawer(Base):
    __tablename__ = "drawer"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    drawer_id: Mapped[str] = mapped_column(Text, nullable=False)
    cashier_id: Mapped[str | None] = mapped_column(Text)
    cashier_name: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="Open")
    opened_at: Mapped[DateTime] = mapped_column(DateTime, nullable=False)
    closed_at: Mapped[DateTime | None] = mapped_column(DateTime)
    current_balance: Mapped[str | None] = mapped_column(Text)
    total_sales: Mapped[str | None] = mapped_column(Text)
    total_expenses: Mapped[str | None] = mapped_column(Text)


class SupplierInvoice(Base):
    __tablename__ = "supplier_invoice"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str] = mapped_column(Text, nullable=False)
    supplier_id: Mapped[int | None] = mapped_column(BigInteger)
    invoice_date: Mapped[DateTime] = mapped_column(DateTime, nullable=False)
    total_amount: Mapped[str | None] = mapped_column(Text)
    amount_paid: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="Draft")


class CustomerPayment(Base):
    __tablename__ = "customer_payment"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    payment_id: Mapped[str] = mapped_column(Text, nullable=False)
    customer_id: Mapped[int | None] = mapped_column(BigInteger)
    amount: Mapped[str | None] = mapped_column(Text)
    payment_method: Mapped[str | None] = mapped_column(Text)
    payment_date: Mapped[DateTime] = mapped_column(DateTime, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)


class InventoryHistory(Base):
    __tablename__ = "inventory_history"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transaction_type: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[str | None] = mapped_column(Text)
    transaction_date: Mapped[DateTime] = mapped_column(DateTime, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)


class RestaurantTable(Base):
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="Available")
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
