# pos/tests/helpers.py

from __future__ import annotations

from pos.services.draft_service import save_draft

CHICKEN_TIKKA = {"id": 7, "name": "Chicken Tikka", "qty": 2, "price": 25}


def draft_payload(**overrides) -> dict:
    payload = {
        "branch": "china_town",
        "table": "5",
        "items": [dict(CHICKEN_TIKKA)],
        "taxPct": 15,
    }
    payload.update(overrides)
    return payload


def make_draft(**overrides):
    """DRAFT order with 2 x 25.00 at 15% VAT (total 57.50) unless overridden."""
    return save_draft(payload=draft_payload(**overrides), default_branch="china_town", default_tax_pct=15)
