from utils.call_config import CallConfig
from utils.slot_time import add_minutes, from_db


def _format_when(dt, config: CallConfig) -> str:
    local = dt.astimezone(config.zone)
    return f"{local.strftime('%a, %d %b %Y %H:%M')} ({config.time_zone})"


def _format_money(amount_minor: int, currency: str) -> str:
    return f"{amount_minor / 100:.2f} {currency}"


def build_call_booking_email(booking, config: CallConfig):
    """(subject, text) describing a booking; used for admin and customer mail alike."""
    start_at = from_db(booking.start_at)
    end_at = add_minutes(start_at, booking.duration_minutes)

    status = (booking.status or "scheduled").upper()
    payment_status = (booking.payment_status or "unpaid").upper()
    amount = booking.amount or 0

    if status == "CANCELLED" and payment_status == "PAID" and amount > 0:
        headline = "Payment received, slot not confirmed"
    elif status == "CANCELLED":
        headline = "Call booking cancelled"
    else:
        headline = "New call booking"
    subject = f"{headline}: {_format_when(start_at, config)} ({booking.duration_minutes}m)"

    payment_line = payment_status
    if amount > 0:
        payment_line = f"{payment_status} {_format_money(amount, booking.currency)}"
        if booking.payment_provider:
            payment_line += f" ({booking.payment_provider})"

    lines = [
        headline,
        f"When: {_format_when(start_at, config)}",
        f"Ends: {_format_when(end_at, config)}",
        f"Duration: {booking.duration_minutes}m",
        f"Status: {status}",
        f"Topic: {booking.topic}",
        f"Title: {booking.title}",
        f"Name: {booking.name}",
        f"Email: {booking.email}",
        f"Payment: {payment_line}",
    ]
    if booking.razorpay_order_id:
        lines.append(f"Razorpay order: {booking.razorpay_order_id}")
    if booking.razorpay_payment_id:
        lines.append(f"Razorpay payment: {booking.razorpay_payment_id}")
    lines.append(f"Booking ID: {booking.id}")
    if status == "CANCELLED" and payment_status == "PAID":
        lines.append("")
        lines.append("The slot was taken before the payment was confirmed. A refund will be arranged.")

    return subject, "\n".join(lines)
