"""
Printable documents: carton labels for the China warehouse and invoice
print views for customers.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from core.config import Settings, settings
from models.invoice import Invoice
from models.item import Item
from models.user import User
from services.rendering import render_template
from services.views import cost_totals


def render_carton_label(
    carton_number: str,
    customer: User,
    items: Sequence[Item],
    packaged_on: Optional[datetime] = None,
    config: Optional[Settings] = None
) -> str:
    config = config or settings
    return render_template(
        "carton_label.html",
        company=config.MAIL_FROM_NAME,
        carton_number=carton_number,
        customer=customer,
        items=list(items),
        totals=cost_totals(items),
        packaged_on=packaged_on or datetime.utcnow(),
    )


def invoice_charges(invoice: Invoice) -> List[Tuple[str, float]]:
    """Non-zero charge lines shown above the invoice total."""
    charges = [
        ("Subtotal", invoice.subtotal),
        ("Shipping", invoice.shipping_charges),
        ("Handling", invoice.handling_charges),
        ("Storage", invoice.storage_charges),
        ("Pickup", invoice.pickup_charges),
        ("Tax", invoice.tax),
    ]
    return [(label, amount) for label, amount in charges if amount]


def render_invoice(invoice: Invoice, customer: User, config: Optional[Settings] = None) -> str:
    config = config or settings
    return render_template(
        "invoice.html",
        company=config.MAIL_FROM_NAME,
        invoice=invoice,
        customer=customer,
        charges=invoice_charges(invoice),
    )
