from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from pos_dashboard.aggregation import aggregate, profit, summarize_invoices
from pos_dashboard.config import settings
from pos_dashboard.models import (
    CustomerPayment,
    Drawer,
    Expense,
    InventoryHistory,
    RestaurantTable,
    SupplierInvoice,
    Transaction,
)
from pos_dashboard.periods import DAY, DateRange, isoformat_ms, resolve_range
from pos_dashboard.schemas import (
    CustomerTotals,
    DashboardSummary,
    DrawerCounts,
    DrawerOut,
    EmployeeOut,
    ExpenseTotals,
    InventoryHistoryOut,
    InvoiceOut,
    InvoiceReport,
    InvoiceSummary,
    PaymentOut,
    PaymentReport,
    PaymentSummary,
    RestaurantCounts,
    RestaurantTableOut,
    SalesReport,
    SalesSummary,
    SalesTotals,
    SupplierCounts,
    TransactionDetailOut,
    TransactionOut,
)

logger = logging.getLogger(__name__)

SALE = "Sale"
ALL_EMPLOYEES = "all"
OPEN_DRAWER = "Open"
PENDING_INVOICE_STATUSES = ("Draft", "Pending")
AVAILABLE_TABLE = "Available"


def _sales_query(date_range: DateRange, employee: Optional[str] = None):
    query = select(Transaction).where(
        Transaction.transaction_type == SALE,
        Transaction.transaction_date >= date_range.start,
        Transaction.transaction_date <= date_range.end,
    )
    if employee and employee != ALL_EMPLOYEES:
        query = query.where(Transaction.cashier_id == employee)
    return query


def _expenses_in_range(db: Session, date_range: DateRange) -> list[Expense]:
    spent_at = func.coalesce(Expense.date, Expense.created_at)
    query = select(Expense).where(spent_at >= date_range.start, spent_at <= date_range.end)
    return list(db.scalars(query))


def _day_range(reference_date: Optional[str]) -> Optional[DateRange]:
    if not reference_date:
        return None
    return resolve_range(reference_date, DAY)


def sales_report(
    db: Session,
    reference_date: Optional[str] = None,
    period: Optional[str] = None,
    employee: Optional[str] = None,
    today: Optional[date] = None,
) -> SalesReport:
    date_range = resolve_range(reference_date, period, today=today)
    sales = list(db.scalars(_sales_query(date_range, employee)))
    expenses = _expenses_in_range(db, date_range)
    sales_totals = aggregate(sales, "total_amount")
    expense_totals = aggregate(expenses, "amount")
    newest_first = sorted(sales, key=lambda row: row.transaction_date, reverse=True)
    logger.debug(
        "sales report %s..%s: %d sales, %d expenses",
        date_range.start,
        date_range.end,
        sales_totals.count,
        expense_totals.count,
    )
    start = isoformat_ms(date_range.start)
    return SalesReport(
        transactions=[
            TransactionOut.from_row(row) for row in newest_first[: settings.sales_list_limit]
        ],
        summary=SalesSummary(
            total_sales=sales_totals.total,
            total_transactions=sales_totals.count,
            total_expense=expense_totals.total,
            profit=profit(sales_totals.total, expense_totals.total),
            date=start,
            start_date=start,
            end_date=isoformat_ms(date_range.end),
            period=period or DAY,
        ),
    )


def dashboard_summary(
    db: Session,
    reference_date: Optional[str] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
) -> DashboardSummary:
    date_range = resolve_range(reference_date, period, today=today)
    sales_totals = aggregate(db.scalars(_sales_query(date_range)), "total_amount")
    expense_totals = aggregate(_expenses_in_range(db, date_range), "amount")
    open_drawers = db.scalar(
        select(func.count()).select_from(Drawer).where(Drawer.status == OPEN_DRAWER)
    )
    pending_invoices = db.scalar(
        select(func.count())
        .select_from(SupplierInvoice)
        .where(SupplierInvoice.status.in_(PENDING_INVOICE_STATUSES))
    )
    payments = db.scalars(
        select(CustomerPayment).where(
            CustomerPayment.payment_date >= date_range.start,
            CustomerPayment.payment_date <= date_range.end,
        )
    )
    payment_totals = aggregate(payments, "amount")
    available_tables = db.scalar(
        select(func.count())
        .select_from(RestaurantTable)
        .where(RestaurantTable.status == AVAILABLE_TABLE, RestaurantTable.is_active.is_(True))
    )
    payload = date_range.to_payload()
    return DashboardSummary(
        sales=SalesTotals(total_amount=sales_totals.total, transaction_count=sales_totals.count),
        expenses=ExpenseTotals(
            total_amount=expense_totals.total, expense_count=expense_totals.count
        ),
        profit=profit(sales_totals.total, expense_totals.total),
        drawers=DrawerCounts(open_count=open_drawers or 0),
        suppliers=SupplierCounts(pending_invoices=pending_invoices or 0),
        customers=CustomerTotals(
            payments_today=payment_totals.total, payment_count=payment_totals.count
        ),
        restaurant=RestaurantCounts(available_tables=available_tables or 0),
        start_date=payload["startDate"],
        end_date=payload["endDate"],
        period=period or DAY,
    )


def list_employees(db: Session) -> list[EmployeeOut]:
    query = (
        select(Transaction.cashier_id, Transaction.cashier_name, Transaction.cashier_role)
        .where(
            Transaction.cashier_id.is_not(None),
            Transaction.cashier_id != "",
            Transaction.cashier_name.is_not(None),
            Transaction.cashier_name != "",
        )
        .order_by(Transaction.id)
    )
    employees: dict[str, EmployeeOut] = {}
    for cashier_id, name, role in db.execute(query):
        if cashier_id not in employees:
            employees[cashier_id] = EmployeeOut(id=cashier_id, name=name, role=role)
    return sorted(employees.values(), key=lambda employee: employee.name)


def list_drawers(
    db: Session,
    status: Optional[str] = None,
    cashier_id: Optional[str] = None,
    reference_date: Optional[str] = None,
) -> list[DrawerOut]:
    query = select(Drawer)
    if status:
        query = query.where(Drawer.status == status)
    if cashier_id:
        query = query.where(Drawer.cashier_id == cashier_id)
    date_range = _day_range(reference_date)
    if date_range is not None:
        query = query.where(Drawer.opened_at >= date_range.start, Drawer.opened_at <= date_range.end)
    query = query.order_by(Drawer.opened_at.desc()).limit(settings.drawer_list_limit)
    return [DrawerOut.from_row(row) for row in db.scalars(query)]


def supplier_invoices(
    db: Session,
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    reference_date: Optional[str] = None,
) -> InvoiceReport:
    query = select(SupplierInvoice)
    if status:
        query = query.where(SupplierInvoice.status == status)
    if supplier_id is not None:
        query = query.where(SupplierInvoice.supplier_id == supplier_id)
    date_range = _day_range(reference_date)
    if date_range is not None:
        query = query.where(
            SupplierInvoice.invoice_date >= date_range.start,
            SupplierInvoice.invoice_date <= date_range.end,
        )
    query = query.order_by(SupplierInvoice.invoice_date.desc()).limit(settings.record_list_limit)
    invoices = list(db.scalars(query))
    totals = summarize_invoices(invoices)
    return InvoiceReport(
        invoices=[InvoiceOut.from_row(row) for row in invoices],
        summary=InvoiceSummary(**totals.model_dump()),
    )


def customer_payments(
    db: Session,
    customer_id: Optional[int] = None,
    payment_method: Optional[str] = None,
    reference_date: Optional[str] = None,
) -> PaymentReport:
    query = select(CustomerPayment)
    if customer_id is not None:
        query = query.where(CustomerPayment.customer_id == customer_id)
    if payment_method:
        query = query.where(CustomerPayment.payment_method == payment_method)
    date_range = _day_range(reference_date)
    if date_range is not None:
        query = query.where(
            CustomerPayment.payment_date >= date_range.start,
            CustomerPayment.payment_date <= date_range.end,
        )
    query = query.order_by(CustomerPayment.payment_date.desc()).limit(settings.record_list_limit)
    payments = list(db.scalars(query))
    totals = aggregate(payments, "amount")
    return PaymentReport(
        payments=[PaymentOut.from_row(row) for row in payments],
        summary=PaymentSummary(total_payments=totals.count, total_amount=totals.total),
    )


def inventory_history(
    db: Session,
    product_id: Optional[int] = None,
    transaction_type: Optional[str] = None,
    reference_date: Optional[str] = None,
) -> list[InventoryHistoryOut]:
    query = select(InventoryHistory)
    if product_id is not None:
        query = query.where(InventoryHistory.product_id == product_id)
    if transaction_type:
        query = query.where(InventoryHistory.transaction_type == transaction_type)
    date_range = _day_range(reference_date)
    if date_range is not None:
        query = query.where(
            InventoryHistory.transaction_date >= date_range.start,
            InventoryHistory.transaction_date <= date_range.end,
        )
    query = query.order_by(InventoryHistory.transaction_date.desc()).limit(
        settings.record_list_limit
    )
    return [InventoryHistoryOut.from_row(row) for row in db.scalars(query)]


def restaurant_tables(
    db: Session,
    status: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> list[RestaurantTableOut]:
    query = select(RestaurantTable)
    if status:
        query = query.where(RestaurantTable.status == status)
    if is_active is not None:
        query = query.where(RestaurantTable.is_active == is_active)
    query = query.order_by(RestaurantTable.table_number)
    return [RestaurantTableOut.from_row(row) for row in db.scalars(query)]


def transaction_details(db: Session, transaction_id: str) -> Optional[TransactionDetailOut]:
    transaction = db.scalars(
        select(Transaction)
        .options(selectinload(Transaction.items))
        .where(Transaction.transaction_id == transaction_id)
    ).first()
    if transaction is None:
        return None
    return TransactionDetailOut.from_row(transaction)
