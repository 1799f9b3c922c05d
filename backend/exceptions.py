"""Domain errors raised by the crud layer.

Routers let these propagate; ``main.py`` maps ``NotFoundError`` to 404 and
``ValidationError`` to 400.
"""


class LedgerError(Exception):
    """Base class for business-rule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    pass


class ValidationError(LedgerError):
    pass


class OrderNotFound(NotFoundError):
    def __init__(self, order_type: str, order_id: int):
        super().__init__(f"{order_type.capitalize()} order {order_id} not found")


class OrderItemNotFound(NotFoundError):
    def __init__(self, item_id: int):
        super().__init__(f"Order item {item_id} not found")


class InvoiceNotFound(NotFoundError):
    def __init__(self, invoice_id: int):
        super().__init__(f"Invoice {invoice_id} not found")


class PaymentNotFound(NotFoundError):
    def __init__(self, payment_id: int):
        super().__init__(f"Payment {payment_id} not found")


class ProductNotFound(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found")


class ContactNotFound(NotFoundError):
    def __init__(self, contact_id: int):
        super().__init__(f"Contact {contact_id} not found")


class AccountNotFound(NotFoundError):
    def __init__(self, account_id: int):
        super().__init__(f"Account with id {account_id} not found")


class InvalidTransition(ValidationError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot transition from {current} to {target}")
        self.current = current
        self.target = target


class EmptyOrder(ValidationError):
    def __init__(self):
        super().__init__("Cannot confirm order without items")


class OrderLocked(ValidationError):
    def __init__(self, status: str):
        super().__init__(f"Items can only be changed on DRAFT orders (order is {status})")


class NonPositiveAmount(ValidationError):
    def __init__(self, amount):
        super().__init__(f"Payment amount must be greater than zero (got {amount})")


class PaymentExceedsBalance(ValidationError):
    def __init__(self, amount, balance):
        super().__init__(f"Payment amount ({amount}) exceeds remaining balance ({balance})")


class InvoiceCancelled(ValidationError):
    def __init__(self, invoice_id: int):
        super().__init__(f"Invoice {invoice_id} is cancelled")


class NegativeLineTotal(ValidationError):
    def __init__(self, total):
        super().__init__(f"Item total cannot be negative (discount exceeds amount, got {total})")


class DuplicateInvoice(ValidationError):
    def __init__(self, order_id: int):
        super().__init__(f"An invoice already exists for order {order_id}")


class DuplicatePaymentNumber(ValidationError):
    def __init__(self, payment_number: str):
        super().__init__(f"Payment number {payment_number} already exists")


class TaxRateNotFound(NotFoundError):
    def __init__(self, tax_rate_id: int):
        super().__init__(f"Tax rate {tax_rate_id} not found")


class PaymentMethodNotFound(NotFoundError):
    def __init__(self, payment_method_id: int):
        super().__init__(f"Payment method {payment_method_id} not found")
