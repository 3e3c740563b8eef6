# StockPulse/notifications/message_generator.py
import pandas as pd

DEFAULT_COMPANY = 'BOLDFIT'
DEFAULT_SENDER_TEAM = 'Inventory Management Team'
DEFAULT_PRODUCT_BASE_URL = 'https://amazon.in/dp/'


def _text(product, field: str, default: str = 'N/A') -> str:
    value = product.get(field) if product is not None else None
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    value = str(value).strip()
    return value or default


def first_asin(asins) -> str:
    """First entry of a comma-separated ASIN list, or '' when there is none."""
    if not isinstance(asins, str):
        return ''
    return asins.split(',')[0].strip()


def product_link(product, base_url: str = DEFAULT_PRODUCT_BASE_URL) -> str:
    asin = first_asin(product.get('asins'))
    return f"{base_url}{asin}" if asin else ''


def format_order_line(product, quantity, base_url: str = DEFAULT_PRODUCT_BASE_URL) -> str:
    lines = [
        f"Product: {_text(product, 'name')}",
        f"SKU: {_text(product, 'sku')}",
        f"GS1 Code: {_text(product, 'gs1_code')}",
        f"Quantity: {int(round(quantity))} units",
    ]
    link = product_link(product, base_url)
    if link:
        lines.append(f"Amazon Link: {link}")
    return "\n".join(lines)


def _sign_off(company: str, team: str) -> str:
    return f"Thank you,\n{company} {team}"


def generate_single_order_email(
    vendor_name: str,
    product,
    quantity,
    company: str = DEFAULT_COMPANY,
    team: str = DEFAULT_SENDER_TEAM,
    base_url: str = DEFAULT_PRODUCT_BASE_URL,
) -> tuple:
    """
    Builds the (subject, body) of an order e-mail for one product.
    `product` is a product row (Series or dict) from the processed product set.
    """
    subject = f"{company} Order Request: {_text(product, 'name')}"
    message_parts = [
        f"Dear {vendor_name},",
        "",
        "We would like to place an order for the following item:",
        "",
        format_order_line(product, quantity, base_url),
        "",
        "Please confirm the availability and estimated delivery time for this order.",
        "",
        _sign_off(company, team),
    ]
    return subject, "\n".join(message_parts)


def generate_bulk_order_email(
    vendor_name: str,
    lines: list,
    company: str = DEFAULT_COMPANY,
    team: str = DEFAULT_SENDER_TEAM,
    base_url: str = DEFAULT_PRODUCT_BASE_URL,
) -> tuple:
    """
    Builds the (subject, body) of one e-mail covering several products for a vendor.

    `lines` is a list of (product row, quantity) pairs, as returned by
    build_vendor_order_lines. With no lines the body is a plain quote request.
    """
    subject = f"{company} Order Request: {vendor_name}"

    if not lines:
        body = (
            f"Dear {vendor_name},\n\n"
            "We would like to place an order. Please provide a quote for the following items.\n\n"
            f"Regards,\n{company} {team}"
        )
        return subject, body

    product_list = "\n\n".join(format_order_line(product, quantity, base_url) for product, quantity in lines)
    message_parts = [
        f"Dear {vendor_name},",
        "",
        "We would like to place an order for the following items:",
        "",
        product_list,
        "",
        "Please confirm the availability and estimated delivery time for these items.",
        "",
        _sign_off(company, team),
    ]
    return subject, "\n".join(message_parts)
