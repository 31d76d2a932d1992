from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pos_dashboard import reports
from pos_dashboard.config import settings
from pos_dashboard.db import SessionLocal
from pos_dashboard.periods import InvalidDateError
from pos_dashboard.schemas import payload_list
from pos_dashboard.views import ViewState, page_context, templates

logger = logging.getLogger(__name__)

app = FastAPI(title="POS Dashboard")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if "*" in settings.allowed_origins else settings.allowed_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

STORAGE_ERROR_MESSAGES = {
    "/api/sales": "فشل في جلب بيانات المبيعات",
    "/api/employees": "فشل في جلب بيانات الموظفين",
    "/api/drawers": "فشل في جلب بيانات الأدراج",
    "/api/supplier-invoices": "فشل في جلب فواتير الموردين",
    "/api/customer-payments": "فشل في جلب مدفوعات العملاء",
    "/api/inventory-history": "فشل في جلب تاريخ المخزون",
    "/api/restaurant-tables": "فشل في جلب طاولات المطعم",
    "/api/dashboard-summary": "فشل في جلب ملخص لوحة التحكم",
    "/api/transaction-details/{transaction_id}": "فشل في جلب تفاصيل المعاملة",
}
DEFAULT_STORAGE_ERROR = "فشل في جلب البيانات"


def _meta(request_id: Optional[str] = None, warnings: Optional[list[str]] = None) -> dict:
    return {
        "request_id": request_id or f"req_{uuid4().hex}",
        "warnings": warnings or [],
    }


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@app.exception_handler(InvalidDateError)
async def invalid_date_handler(request: Request, exc: InvalidDateError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    path = _route_path(request)
    logger.error("storage query failed on %s", path, exc_info=exc)
    message = STORAGE_ERROR_MESSAGES.get(path, DEFAULT_STORAGE_ERROR)
    return JSONResponse(status_code=500, content={"detail": message})


@app.get("/", tags=["dashboard"], response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    section: str = Query(default="dashboard"),
    date: Optional[str] = Query(default=None),
    period: Optional[str] = Query(default=None),
    employee: str = Query(default=reports.ALL_EMPLOYEES),
    status: Optional[str] = Query(default=None),
    payment_method: Optional[str] = Query(default=None, alias="paymentMethod"),
    transaction_type: Optional[str] = Query(default=None, alias="transactionType"),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    state = ViewState(
        section=section,
        date=date,
        period=period,
        employee=employee,
        status=status,
        payment_method=payment_method,
        transaction_type=transaction_type,
    )
    return templates.TemplateResponse(request, "page.html", page_context(state, db))


@app.get("/health", tags=["health"])
def health_check() -> dict:
    return {"status": "healthy"}


@app.get("/api/sales", tags=["Sales"])
def get_sales(
    date: Optional[str] = Query(default=None),
    period: Optional[str] = Query(default=None),
    employee: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    report = reports.sales_report(db, date, period, employee)
    return {**report.to_payload(), "meta": _meta()}


@app.get("/api/dashboard-summary", tags=["Dashboard"])
def get_dashboard_summary(
    date: Optional[str] = Query(default=None),
    period: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    summary = reports.dashboard_summary(db, date, period)
    return {**summary.to_payload(), "meta": _meta()}


@app.get("/api/employees", tags=["Employees"])
def get_employees(db: Session = Depends(get_db)) -> dict:
    return {"data": payload_list(reports.list_employees(db)), "meta": _meta()}


@app.get("/api/drawers", tags=["Drawers"])
def get_drawers(
    status: Optional[str] = Query(default=None),
    cashier_id: Optional[str] = Query(default=None, alias="cashierId"),
    date: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    drawers = reports.list_drawers(db, status, cashier_id, date)
    return {"data": payload_list(drawers), "meta": _meta()}


@app.get("/api/supplier-invoices", tags=["Supplier Invoices"])
def get_supplier_invoices(
    status: Optional[str] = Query(default=None),
    supplier_id: Optional[int] = Query(default=None, alias="supplierId"),
    date: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    report = reports.supplier_invoices(db, status, supplier_id, date)
    return {**report.to_payload(), "meta": _meta()}


@app.get("/api/customer-payments", tags=["Customer Payments"])
def get_customer_payments(
    customer_id: Optional[int] = Query(default=None, alias="customerId"),
    payment_method: Optional[str] = Query(default=None, alias="paymentMethod"),
    date: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    report = reports.customer_payments(db, customer_id, payment_method, date)
    return {**report.to_payload(), "meta": _meta()}


@app.get("/api/inventory-history", tags=["Inventory"])
def get_inventory_history(
    product_id: Optional[int] = Query(default=None, alias="productId"),
    transaction_type: Optional[str] = Query(default=None, alias="transactionType"),
    date: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    history = reports.inventory_history(db, product_id, transaction_type, date)
    return {"data": payload_list(history), "meta": _meta()}


@app.get("/api/restaurant-tables", tags=["Restaurant"])
def get_restaurant_tables(
    status: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    db: Session = Depends(get_db),
) -> dict:
    tables = reports.restaurant_tables(db, status, is_active)
    return {"data": payload_list(tables), "meta": _meta()}


@app.get("/api/transaction-details/{transaction_id}", tags=["Sales"])
def get_transaction_details(transaction_id: str, db: Session = Depends(get_db)) -> dict:
    transaction = reports.transaction_details(db, transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="transaction not found")
    return {"data": transaction.to_payload(), "meta": _meta()}


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
