"""
PATH: pos/services/line_items.py

LINE-ITEM NORMALIZER (PURE)

Order lines arrive in many shapes: real lists, JSON strings, JSON strings
that encode another JSON string, mixed key names (qty/quantity,
price/unit_price, product_id/item_id/id). This module turns them into one
canonical item shape:

    {"type": "item", "product_id": int | None, "name": str, "name_en": str,
     "qty": number, "price": number, "discount": number}

Rules:
- At most TWO decode attempts per payload / element; anything still not a
  list / dict after that is dropped.
- Non-numeric or out-of-range values coerce to 0 (ids coerce to None).
- Elements with a non-"item" type (meta, tax, discount rows) are dropped.
- An element survives only with a quantity field that coerces to > 0 and
  a product reference or a non-empty name.
- Order is preserved. Normalizing a canonical list returns it unchanged.

No database access here.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ITEM = "item"
META = "meta"

MAX_DECODE_ATTEMPTS = 2

NUMERIC_FIELDS = ("qty", "price", "discount")

BRANCH_ALIASES = {
    "palace_india": "place_india",
    "palce_india": "place_india",
}

TWOPLACES = Decimal("0.01")

# anything larger is treated as non-numeric
MAX_MAGNITUDE = Decimal("1e12")


# =====================================================
# ERRORS
# =====================================================

class LineItemError(ValueError):
    code = "invalid_lines"


class InvalidLines(LineItemError):
    code = "invalid_lines"


class InvalidLineValues(LineItemError):
    code = "invalid_values"


class InvalidLinesJson(LineItemError):
    code = "invalid_json"


# =====================================================
# DECODING
# =====================================================

def _decode(value, expected: tuple):
    for _ in range(MAX_DECODE_ATTEMPTS):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except (TypeError, ValueError):
            return None

    return value if isinstance(value, expected) else None


def decode_lines(raw) -> list:
    if isinstance(raw, (list, tuple)):
        return list(raw)

    decoded = _decode(raw, (list,))
    return decoded if decoded is not None else []


def decode_line(element) -> dict | None:
    if isinstance(element, dict):
        return element
    return _decode(element, (dict,))


# =====================================================
# COERCION
# =====================================================

def _parse_number(value):
    """
    Return an int / float for numeric-looking input, None otherwise.
    Integral values come back as int so canonical lines stay stable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value if abs(value) <= MAX_MAGNITUDE else None

    if isinstance(value, float):
        return value if math.isfinite(value) and abs(value) <= MAX_MAGNITUDE else None

    if isinstance(value, (str, Decimal)):
        try:
            dec = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
        if not dec.is_finite() or abs(dec) > MAX_MAGNITUDE:
            return None
        if dec == dec.to_integral_value():
            return int(dec)
        return float(dec)

    return None


def to_number(value):
    parsed = _parse_number(value)
    return 0 if parsed is None else parsed


def to_int_id(value) -> int | None:
    """Whole-number id (product, customer, order) or None."""
    parsed = _parse_number(value)
    if parsed is None or parsed != int(parsed):
        return None
    return int(parsed)


def _first_present(element: dict, *keys):
    for key in keys:
        value = element.get(key)
        if value is not None:
            return value
    return None


# =====================================================
# NORMALIZATION
# =====================================================

def normalize_item_line(element) -> dict | None:
    line = decode_line(element)
    if line is None:
        return None

    line_type = line.get("type")
    if line_type not in (None, "") and str(line_type).strip() != ITEM:
        return None

    raw_qty = _first_present(line, "qty", "quantity")
    if raw_qty is None:
        return None

    qty = to_number(raw_qty)
    if qty <= 0:
        return None

    product_id = to_int_id(_first_present(line, "product_id", "item_id", "id"))
    name = line.get("name")
    name = "" if name is None else str(name)

    if not product_id and not name.strip():
        return None

    name_en = line.get("name_en")

    return {
        "type": ITEM,
        "product_id": product_id,
        "name": name,
        "name_en": "" if name_en is None else str(name_en),
        "qty": qty,
        "price": to_number(_first_present(line, "price", "unit_price")),
        "discount": to_number(line.get("discount")),
    }


def normalize_item_lines(raw) -> list[dict]:
    items = []
    for element in decode_lines(raw):
        item = normalize_item_line(element)
        if item is not None:
            items.append(item)
    return items


def extract_meta(raw) -> dict | None:
    for element in decode_lines(raw):
        line = decode_line(element)
        if line is not None and line.get("type") == META:
            return line
    return None


def validate_canonical_lines(lines) -> None:
    """
    Final gate before persisting invoice lines.
    Raises InvalidLines / InvalidLineValues / InvalidLinesJson.
    """
    if not isinstance(lines, list):
        raise InvalidLines("Invoice lines must be a list")

    for idx, line in enumerate(lines):
        if not isinstance(line, dict):
            raise InvalidLines(f"Line {idx} is not an object")

        for field in NUMERIC_FIELDS:
            value = line.get(field)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidLineValues(f"Line {idx} has a non-numeric {field}: {value!r}")

        product_id = line.get("product_id")
        if product_id is not None and (isinstance(product_id, bool) or not isinstance(product_id, int)):
            raise InvalidLineValues(f"Line {idx} has an invalid product_id: {product_id!r}")

    try:
        json.dumps(lines, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise InvalidLinesJson(f"Invoice lines are not JSON-serializable: {exc}") from exc


# =====================================================
# BRANCH + TOTALS
# =====================================================

def normalize_branch_name(branch) -> str:
    slug = "_".join(str(branch or "").strip().lower().split())
    return BRANCH_ALIASES.get(slug, slug)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_totals(items: list[dict], *, discount_pct=0, tax_pct=0) -> Totals:
    """
    subtotal = sum(qty * price)
    discount = sum(line discount) + subtotal * discount_pct / 100
    tax      = (subtotal - discount) * tax_pct / 100
    total    = subtotal - discount + tax
    """
    subtotal = Decimal("0")
    line_discounts = Decimal("0")
    for item in items:
        subtotal += Decimal(str(to_number(item.get("qty")))) * Decimal(str(to_number(item.get("price"))))
        line_discounts += Decimal(str(to_number(item.get("discount"))))

    discount = line_discounts + subtotal * Decimal(str(to_number(discount_pct))) / Decimal("100")
    tax = (subtotal - discount) * Decimal(str(to_number(tax_pct))) / Decimal("100")

    subtotal = _money(subtotal)
    discount = _money(discount)
    tax = _money(tax)
    return Totals(
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        total=subtotal - discount + tax,
    )
