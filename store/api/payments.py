# store/api/payments.py
from ..schemas import PaymentInit, PaymentVerification
from .client import parse


def initialize_chapa(client, order_id):
    return parse(PaymentInit, client.post("/payment/initialize/chapa", {"orderId": order_id}))


def verify_chapa(client, invoice_number):
    return parse(PaymentVerification, client.get(f"/payment/verify/chapa/{invoice_number}"))


def reinitialize_chapa(client, invoice_number):
    return parse(PaymentInit, client.get(f"/payment/reinitialize/chapa/{invoice_number}"))
