from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pos_dashboard.db import Base
from pos_dashboard.main import app, get_db
from pos_dashboard.models import (
    CustomerPayment,
    Drawer,
    Expense,
    InventoryHistory,
    RestaurantTable,
    SupplierInvoice,
    Transaction,
    TransactionItem,
)


def _seed(db: Session) -> None:
    first_sale = Transaction(
        transaction_id="T-1",
        transaction_date=datetime(2024, 3, 15, 10, 30),
        transaction_type="Sale",
        total_amount="120.50",
        tax_amount="10",
        paid_amount="150",
        cashier_id="c1",
        cashier_name="Sara",
        cashier_role="cashier",
        customer_name="Walk-in",
        payment_method="Cash",
    )
    first_sale.items = [
        TransactionItem(product_id="p1", product_name="Tea", quantity="2", unit_price="20.25", total="40.50"),
        TransactionItem(product_id="p2", product_name="Cake", quantity="1", unit_price="80", total="80"),
    ]
    db.add_all(
        [
            first_sale,
            Transaction(
                transaction_id="T-2",
                transaction_date=datetime(2024, 3, 15, 18, 0),
                transaction_type="Sale",
                total_amount="130.25",
                cashier_id="c2",
                cashier_name="Omar",
            ),
            Transaction(
                transaction_id="T-3",
                transaction_date=datetime(2024, 3, 15, 12, 0),
                transaction_type="Refund",
                total_amount="40",
                cashier_id="c1",
                cashier_name="Sara",
            ),
            Transaction(
                transaction_id="T-4",
                transaction_date=datetime(2024, 3, 16, 9, 0),
                transaction_type="Sale",
                total_amount="99",
                cashier_id="c3",
                cashier_name="",
            ),
            Transaction(
                transaction_id="T-5",
                transaction_date=datetime(2024, 3, 15, 20, 0),
                transaction_type="Sale",
                total_amount="abc",
                cashier_id="c1",
                cashier_name="Sara",
            ),
            Expense(date=datetime(2024, 3, 15, 9, 0), amount="60"),
            Expense(date=None, created_at=datetime(2024, 3, 15, 13, 0), amount="40.00"),
            Expense(date=datetime(2024, 3, 20, 9, 0), created_at=datetime(2024, 3, 15, 9, 0), amount="500"),
            Drawer(
                drawer_id="D-1",
                cashier_id="c1",
                cashier_name="Sara",
                status="Open",
                opened_at=datetime(2024, 3, 15, 8, 0),
                current_balance="500",
                total_sales="250.75",
                total_expenses="100",
            ),
            Drawer(
                drawer_id="D-2",
                cashier_id="c2",
                cashier_name="Omar",
                status="Closed",
                opened_at=datetime(2024, 3, 14, 8, 0),
                closed_at=datetime(2024, 3, 14, 22, 0),
                current_balance="0",
            ),
            SupplierInvoice(
                invoice_number="INV-1",
                supplier_id=3,
                invoice_date=datetime(2024, 3, 15, 9, 0),
                total_amount="1800.00",
                amount_paid="1000.00",
                status="Pending",
            ),
            SupplierInvoice(
                invoice_number="INV-2",
                supplier_id=4,
                invoice_date=datetime(2024, 3, 15, 11, 0),
                total_amount="200",
                amount_paid="250",
                status="Paid",
            ),
            SupplierInvoice(
                invoice_number="INV-3",
                supplier_id=3,
                invoice_date=datetime(2024, 3, 10, 9, 0),
                total_amount="300",
                status="Draft",
            ),
            CustomerPayment(
                payment_id="P-1",
                customer_id=7,
                amount="75.5",
                payment_method="Cash",
                payment_date=datetime(2024, 3, 15, 11, 0),
            ),
            CustomerPayment(
                payment_id="P-2",
                customer_id=8,
                amount="24.5",
                payment_method="Card",
                payment_date=datetime(2024, 3, 15, 16, 0),
                notes="partial",
            ),
            CustomerPayment(
                payment_id="P-3",
                customer_id=7,
                amount="10",
                payment_method="Cash",
                payment_date=datetime(2024, 3, 14, 16, 0),
            ),
            InventoryHistory(
                product_id=5,
                transaction_type="Sale",
                quantity="2",
                transaction_date=datetime(2024, 3, 15, 10, 30),
            ),
            InventoryHistory(
                product_id=5,
                transaction_type="Restock",
                quantity="10",
                transaction_date=datetime(2024, 3, 14, 9, 0),
            ),
            RestaurantTable(table_number=2, status="Occupied", description="Patio", is_active=True),
            RestaurantTable(table_number=1, status="Available", description="Window", is_active=True),
            RestaurantTable(table_number=3, status="Available", description="Storage", is_active=False),
        ]
    )
    db.commit()


def _make_client(seed: bool = True, create_tables: bool = True) -> TestClient:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    if create_tables:
        Base.metadata.create_all(bind=engine)
    if seed and create_tables:
        with TestingSessionLocal() as db:
            _seed(db)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def test_health() -> None:
    client = _make_client(seed=False)
    with client:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}


def test_sales_day_summary_and_profit() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "2024-03-15"})
        assert resp.status_code == 200
        body = resp.json()
        summary = body["summary"]
        assert summary["totalSales"] == 250.75
        assert summary["totalTransactions"] == 3
        assert summary["totalExpense"] == 100.0
        assert summary["profit"] == 150.75
        assert summary["startDate"] == "2024-03-15T00:00:00.000"
        assert summary["endDate"] == "2024-03-15T23:59:59.999"
        assert summary["date"] == summary["startDate"]
        assert summary["period"] == "day"
        assert [tx["transactionId"] for tx in body["transactions"]] == ["T-5", "T-2", "T-1"]
        assert body["transactions"][0]["totalAmount"] == 0.0
        assert body["meta"]["request_id"].startswith("req_")


def test_sales_week_window_runs_forward_seven_days() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "2024-03-15", "period": "week"})
        assert resp.status_code == 200
        summary = resp.json()["summary"]
        assert summary["totalSales"] == 349.75
        assert summary["totalTransactions"] == 4
        assert summary["totalExpense"] == 600.0
        assert summary["endDate"] == "2024-03-21T23:59:59.999"
        assert summary["period"] == "week"


def test_sales_custom_period_behaves_like_day() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "2024-03-15", "period": "custom"})
        summary = resp.json()["summary"]
        assert summary["totalSales"] == 250.75
        assert summary["endDate"] == "2024-03-15T23:59:59.999"
        assert summary["period"] == "custom"


def test_sales_employee_filter() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "2024-03-15", "employee": "c1"})
        summary = resp.json()["summary"]
        assert summary["totalSales"] == 120.5
        assert summary["totalTransactions"] == 2

        resp = client.get("/api/sales", params={"date": "2024-03-15", "employee": "all"})
        assert resp.json()["summary"]["totalTransactions"] == 3


def test_sales_rejects_unparseable_date() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "not-a-date"})
        assert resp.status_code == 400
        assert "not-a-date" in resp.json()["detail"]


def test_sales_rejects_week_past_last_representable_date() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/sales", params={"date": "9999-12-30", "period": "week"})
        assert resp.status_code == 400
        assert "9999-12-30" in resp.json()["detail"]

        resp = client.get("/", params={"section": "sales", "date": "9999-12-30", "period": "week"})
        assert resp.status_code == 400


def test_report_and_list_response_shapes() -> None:
    client = _make_client()
    with client:
        sales = client.get("/api/sales", params={"date": "2024-03-15"}).json()
        assert set(sales) == {"transactions", "summary", "meta"}

        invoices = client.get("/api/supplier-invoices").json()
        assert set(invoices) == {"invoices", "summary", "meta"}

        payments = client.get("/api/customer-payments").json()
        assert set(payments) == {"payments", "summary", "meta"}

        drawers = client.get("/api/drawers").json()
        assert set(drawers) == {"data", "meta"}
        assert drawers["meta"]["request_id"].startswith("req_")


def test_storage_failure_returns_localized_message() -> None:
    client = _make_client(create_tables=False)
    with client:
        resp = client.get("/api/sales", params={"date": "2024-03-15"})
        assert resp.status_code == 500
        assert resp.json() == {"detail": "فشل في جلب بيانات المبيعات"}

        resp = client.get("/api/restaurant-tables")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "فشل في جلب طاولات المطعم"}


def test_dashboard_summary() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/dashboard-summary", params={"date": "2024-03-15"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["sales"] == {"totalAmount": 250.75, "transactionCount": 3}
        assert body["expenses"] == {"totalAmount": 100.0, "expenseCount": 2}
        assert body["profit"] == 150.75
        assert body["drawers"] == {"openCount": 1}
        assert body["suppliers"] == {"pendingInvoices": 2}
        assert body["customers"] == {"paymentsToday": 100.0, "paymentCount": 2}
        assert body["restaurant"] == {"availableTables": 1}
        assert body["startDate"] == "2024-03-15T00:00:00.000"


def test_employees_are_distinct_and_sorted_by_name() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/employees")
        assert resp.status_code == 200
        assert resp.json()["data"] == [
            {"id": "c2", "name": "Omar", "role": None},
            {"id": "c1", "name": "Sara", "role": "cashier"},
        ]


def test_drawers_filters() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/drawers", params={"date": "2024-03-15"})
        data = resp.json()["data"]
        assert [drawer["drawerId"] for drawer in data] == ["D-1"]
        assert data[0]["currentBalance"] == 500.0
        assert data[0]["closedAt"] is None

        resp = client.get("/api/drawers", params={"status": "Closed"})
        assert [drawer["drawerId"] for drawer in resp.json()["data"]] == ["D-2"]

        resp = client.get("/api/drawers", params={"cashierId": "c1"})
        assert [drawer["drawerId"] for drawer in resp.json()["data"]] == ["D-1"]


def test_supplier_invoices_summary() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/supplier-invoices", params={"date": "2024-03-15"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"] == {
            "totalInvoices": 2,
            "totalAmount": 2000.0,
            "totalPaid": 1250.0,
            "totalOutstanding": 750.0,
        }
        by_number = {invoice["invoiceNumber"]: invoice for invoice in body["invoices"]}
        assert by_number["INV-1"]["outstanding"] == 800.0
        assert by_number["INV-2"]["outstanding"] == -50.0

        resp = client.get("/api/supplier-invoices", params={"supplierId": 3})
        assert resp.json()["summary"]["totalInvoices"] == 2


def test_customer_payments_summary() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/customer-payments", params={"date": "2024-03-15"})
        body = resp.json()
        assert body["summary"] == {"totalPayments": 2, "totalAmount": 100.0}
        assert [payment["paymentId"] for payment in body["payments"]] == ["P-2", "P-1"]

        resp = client.get("/api/customer-payments", params={"paymentMethod": "Cash"})
        assert resp.json()["summary"] == {"totalPayments": 2, "totalAmount": 85.5}


def test_inventory_history_filters() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/inventory-history", params={"productId": 5})
        data = resp.json()["data"]
        assert [item["transactionType"] for item in data] == ["Sale", "Restock"]

        resp = client.get("/api/inventory-history", params={"transactionType": "Restock"})
        data = resp.json()["data"]
        assert len(data) == 1
        assert data[0]["quantity"] == 10.0


def test_restaurant_tables_filters() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/restaurant-tables")
        assert [table["tableNumber"] for table in resp.json()["data"]] == [1, 2, 3]

        resp = client.get("/api/restaurant-tables", params={"isActive": "false"})
        assert [table["tableNumber"] for table in resp.json()["data"]] == [3]

        resp = client.get("/api/restaurant-tables", params={"status": "Available", "isActive": "true"})
        assert [table["tableNumber"] for table in resp.json()["data"]] == [1]


def test_transaction_details() -> None:
    client = _make_client()
    with client:
        resp = client.get("/api/transaction-details/T-1")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["totalAmount"] == 120.5
        assert data["paidAmount"] == 150.0
        assert data["taxAmount"] == 10.0
        assert data["discountAmount"] == 0.0
        assert [item["productName"] for item in data["items"]] == ["Tea", "Cake"]
        assert data["items"][0]["unitPrice"] == 20.25

        missing = client.get("/api/transaction-details/T-404")
        assert missing.status_code == 404
        assert missing.json()["detail"] == "transaction not found"


def test_dashboard_page_renders_sales_section() -> None:
    client = _make_client()
    with client:
        resp = client.get("/", params={"section": "sales", "date": "2024-03-15"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "$250.75" in resp.text
        assert "#T-1" in resp.text
        assert "Omar" in resp.text


def test_dashboard_page_renders_summary_cards() -> None:
    client = _make_client()
    with client:
        resp = client.get("/", params={"date": "2024-03-15"})
        assert resp.status_code == 200
        assert "$150.75" in resp.text
        assert "$100.00" in resp.text
