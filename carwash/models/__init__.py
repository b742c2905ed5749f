from carwash.models.appointment import Appointment
from carwash.models.catalog import Service
from carwash.models.customer import Customer
from carwash.models.inventory import InventoryItem
from carwash.models.invoice import Invoice, InvoiceSequence
from carwash.models.invoice_item import InvoiceItem
from carwash.models.promotion import Promotion, PromotionSend

__all__ = [
    "Appointment",
    "Customer",
    "InventoryItem",
    "Invoice",
    "InvoiceItem",
    "InvoiceSequence",
    "Promotion",
    "PromotionSend",
    "Service",
]
