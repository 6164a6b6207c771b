"""
InvoiceMe invoicing core.

Layers:
- domain: invoice, payment and customer models, events, services and
  repository contracts
- application: use cases and DTOs
- infrastructure: SQLAlchemy persistence and event handlers
"""

__version__ = "1.0.0"
