# store/api/analytics.py
from ..schemas import DashboardSummary, DeliveryReport, OrderTrend, PaymentReport, SalesReport
from .client import parse, parse_list


def get_dashboard(client):
    return parse(DashboardSummary, client.get("/analytics/dashboard") or {})


def get_sales(client, date_from=None, date_to=None):
    data = client.get("/analytics/sales", params={"from": date_from, "to": date_to})
    return parse(SalesReport, data or {})


def get_order_trends(client, date_from=None, date_to=None):
    """One row per day in the range."""
    data = client.get("/analytics/orders/trends", params={"from": date_from, "to": date_to})
    return parse_list(OrderTrend, data)


def get_payments(client):
    return parse(PaymentReport, client.get("/analytics/payments") or {})


def get_deliveries(client):
    return parse(DeliveryReport, client.get("/analytics/deliveries") or {})
