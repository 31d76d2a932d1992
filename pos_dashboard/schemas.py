from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from pos_dashboard.aggregation import coerce_amount, outstanding
from pos_dashboard.models import (
    CustomerPayment,
    Drawer,
    InventoryHistory,
    RestaurantTable,
    SupplierInvoice,
    Transaction,
    TransactionItem,
)


class CamelModel(BaseModel):
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TransactionOut(CamelModel):
    transaction_id: str
    transaction_date: datetime
    transaction_type: str
    total_amount: float
    cashier_id: Optional[str] = None
    cashier_name: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    payment_method: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_row(cls, row: Transaction) -> "TransactionOut":
        return cls(
            transaction_id=row.transaction_id,
            transaction_date=row.transaction_date,
            transaction_type=row.transaction_type,
            total_amount=coerce_amount(row.total_amount),
            cashier_id=row.cashier_id,
            cashier_name=row.cashier_name,
            customer_id=row.customer_id,
            customer_name=row.customer_name,
            payment_method=row.payment_method,
            status=row.status,
        )


class TransactionItemOut(CamelModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: float
    unit_price: float
    discount: float
    total: float

    @classmethod
    def from_row(cls, row: TransactionItem) -> "TransactionItemOut":
        return cls(
            product_id=row.product_id,
            product_name=row.product_name,
            quantity=coerce_amount(row.quantity),
            unit_price=coerce_amount(row.unit_price),
            discount=coerce_amount(row.discount),
            total=coerce_amount(row.total),
        )


class TransactionDetailOut(TransactionOut):
    cashier_role: Optional[str] = None
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    paid_amount: float = 0.0
    notes: Optional[str] = None
    items: list[TransactionItemOut] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: Transaction) -> "TransactionDetailOut":
        base = TransactionOut.from_row(row)
        return cls(
            **base.model_dump(),
            cashier_role=row.cashier_role,
            tax_amount=coerce_amount(row.tax_amount),
            discount_amount=coerce_amount(row.discount_amount),
            paid_amount=coerce_amount(row.paid_amount),
            notes=row.notes,
            items=[TransactionItemOut.from_row(item) for item in row.items],
        )


class SalesSummary(CamelModel):
    total_sales: float
    total_transactions: int
    total_expense: float
    profit: float
    date: str
    start_date: str
    end_date: str
    period: str


class SalesReport(CamelModel):
    transactions: list[TransactionOut]
    summary: SalesSummary


class SalesTotals(CamelModel):
    total_amount: float
    transaction_count: int


class ExpenseTotals(CamelModel):
    total_amount: float
    expense_count: int


class DrawerCounts(CamelModel):
    open_count: int


class SupplierCounts(CamelModel):
    pending_invoices: int


class CustomerTotals(CamelModel):
    payments_today: float
    payment_count: int


class RestaurantCounts(CamelModel):
    available_tables: int


class DashboardSummary(CamelModel):
    sales: SalesTotals
    expenses: ExpenseTotals
    profit: float
    drawers: DrawerCounts
    suppliers: SupplierCounts
    customers: CustomerTotals
    restaurant: RestaurantCounts
    start_date: str
    end_date: str
    period: str


class EmployeeOut(CamelModel):
    id: str
    name: str
    role: Optional[str] = None


class DrawerOut(CamelModel):
    drawer_id: str
    cashier_id: Optional[str] = None
    cashier_name: Optional[str] = None
    status: str
    opened_at: datetime
    closed_at: Optional[datetime] = None
    current_balance: float
    total_sales: float
    total_expenses: float

    @classmethod
    def from_row(cls, row: Drawer) -> "DrawerOut":
        return cls(
            drawer_id=row.drawer_id,
            cashier_id=row.cashier_id,
            cashier_name=row.cashier_name,
            status=row.status,
            opened_at=row.opened_at,
            closed_at=row.closed_at,
            current_balance=coerce_amount(row.current_balance),
            total_sales=coerce_amount(row.total_sales),
            total_expenses=coerce_amount(row.total_expenses),
        )


class InvoiceOut(CamelModel):
    invoice_number: str
    supplier_id: Optional[int] = None
    invoice_date: datetime
    total_amount: float
    amount_paid: float
    outstanding: float
    status: str

    @classmethod
    def from_row(cls, row: SupplierInvoice) -> "InvoiceOut":
        return cls(
            invoice_number=row.invoice_number,
            supplier_id=row.supplier_id,
            invoice_date=row.invoice_date,
            total_amount=coerce_amount(row.total_amount),
            amount_paid=coerce_amount(row.amount_paid),
            outstanding=outstanding(row.total_amount, row.amount_paid),
            status=row.status,
        )


class InvoiceSummary(CamelModel):
    total_invoices: int
    total_amount: float
    total_paid: float
    total_outstanding: float


class InvoiceReport(CamelModel):
    invoices: list[InvoiceOut]
    summary: InvoiceSummary


class PaymentOut(CamelModel):
    payment_id: str
    customer_id: Optional[int] = None
    amount: float
    payment_method: Optional[str] = None
    payment_date: datetime
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: CustomerPayment) -> "PaymentOut":
        return cls(
            payment_id=row.payment_id,
            customer_id=row.customer_id,
            amount=coerce_amount(row.amount),
            payment_method=row.payment_method,
            payment_date=row.payment_date,
            notes=row.notes,
        )


class PaymentSummary(CamelModel):
    total_payments: int
    total_amount: float


class PaymentReport(CamelModel):
    payments: list[PaymentOut]
    summary: PaymentSummary


class InventoryHistoryOut(CamelModel):
    product_id: int
    transaction_type: str
    quantity: float
    transaction_date: datetime
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: InventoryHistory) -> "InventoryHistoryOut":
        return cls(
            product_id=row.product_id,
            transaction_type=row.transaction_type,
            quantity=coerce_amount(row.quantity),
            transaction_date=row.transaction_date,
            notes=row.notes,
        )


class RestaurantTableOut(CamelModel):
    table_number: int
    status: str
    description: Optional[str] = None
    is_active: bool

    @classmethod
    def from_row(cls, row: RestaurantTable) -> "RestaurantTableOut":
        return cls(
            table_number=row.table_number,
            status=row.status,
            description=row.description,
            is_active=row.is_active,
        )


def payload_list(items: list[CamelModel]) -> list[dict[str, Any]]:
    return [item.to_payload() for item in items]
