from models.audit_log import AuditLog
from models.contacts import Contact
from models.products import Product
from models.order_items import OrderItem
from models.purchase_orders import PurchaseOrder
from models.sales_orders import SalesOrder
from models.invoices import Invoice
from models.payments import Payment
from models.chart_of_accounts import ChartOfAccounts
from models.tax_rates import TaxRate, TaxConfiguration
from models.payment_methods import PaymentMethodSetting

__all__ = ['AuditLog', 'ChartOfAccounts', 'Contact', 'Invoice', 'OrderItem', 'Payment', 'PaymentMethodSetting', 'Product', 'PurchaseOrder', 'SalesOrder', 'TaxConfiguration', 'TaxRate',]
