# backend/orders/emails.py
import logging

from django.conf import settings

from utils.dates import label_for_date_key, to_date_key
from utils.sendgrid_email import branded_html, escape_html, send_email_with_sendgrid

from .models import Order

LOGGER = logging.getLogger(__name__)


def _money(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def _sections(order: Order):
    """[(heading, [(name, qty, line_cents)])] per delivery group, ungrouped lines last."""
    sections = []
    for group in order.delivery_groups.all().order_by("service_date", "slot_label"):
        heading = label_for_date_key(to_date_key(group.service_date))
        if group.slot_label:
            heading = f"{heading} · {group.slot_label}"
        lines = [
            (f"{item.name} ({item.variant_label})" if item.variant_label else item.name, item.quantity, item.line_total_cents)
            for item in group.items.all().order_by("id")
        ]
        lines += [(f"+ {a.name}", a.quantity, a.quantity * a.price_cents) for a in group.add_ons.all().order_by("id")]
        sections.append((heading, lines))

    loose = [
        (f"{item.name} ({item.variant_label})" if item.variant_label else item.name, item.quantity, item.line_total_cents)
        for item in order.order_items.filter(delivery_group__isnull=True).order_by("id")
    ]
    loose += [
        (f"+ {a.name}", a.quantity, a.quantity * a.price_cents)
        for a in order.add_ons.filter(delivery_group__isnull=True).order_by("id")
    ]
    if loose:
        sections.append(("Other items", loose))
    return sections


def build_confirmation(order: Order):
    brand = getattr(settings, "EMAIL_BRAND_NAME", "Food Savvy")
    subject = f"Your {brand} order #{order.id} is confirmed"
    how = "Delivery to " + order.address if order.fulfillment == "delivery" and order.address else order.fulfillment.title()
    sections = _sections(order)

    text = [f"Hi {order.customer_name or 'there'},", "", f"Thanks for your order #{order.id}. {how}.", ""]
    for heading, lines in sections:
        text.append(heading)
        text.extend(f"  {qty} x {name}  {_money(cents)}" for name, qty, cents in lines)
        text.append("")
    text.append(f"Total paid: {_money(order.total_cents)}")

    blocks = []
    for heading, lines in sections:
        rows = "".join(
            f"<tr><td style='padding:4px 0;'>{qty} × {escape_html(name)}</td>"
            f"<td align='right' style='padding:4px 0;'>{_money(cents)}</td></tr>"
            for name, qty, cents in lines
        )
        blocks.append(
            f"<p style='margin:14px 0 4px 0;font-weight:700;'>{escape_html(heading)}</p>"
            f"<table role='presentation' width='100%' cellpadding='0' cellspacing='0'>{rows}</table>"
        )
    blocks.append(f"<p style='margin:16px 0 0 0;font-weight:800;'>Total paid: {_money(order.total_cents)}</p>")

    html = branded_html(
        title=subject,
        intro=f"Thanks{', ' + order.customer_name if order.customer_name else ''}! {how}.",
        content_html="".join(blocks),
        cta_label="View your order",
        cta_url=f"{getattr(settings, 'FRONTEND_URL', '').rstrip('/')}/order-confirmation?pi={order.stripe_payment_intent_id or ''}",
    )
    return subject, "\n".join(text), html


def send_order_confirmation(order: Order) -> bool:
    if not order.customer_email:
        LOGGER.warning("Order %s has no customer email; confirmation skipped", order.id)
        return False
    subject, text_body, html_body = build_confirmation(order)
    return send_email_with_sendgrid(
        to_email=order.customer_email,
        subject=subject,
        text_body=text_body,
        html_body=html_body,
    )
