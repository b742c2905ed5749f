from carwash.storage.base import InvoiceBundle, InvoiceHeader, InvoiceLine, Storage
from carwash.storage.memory import MemoryStorage
from carwash.storage.sql import SqlStorage

__all__ = ["InvoiceBundle", "InvoiceHeader", "InvoiceLine", "MemoryStorage", "SqlStorage", "Storage"]
