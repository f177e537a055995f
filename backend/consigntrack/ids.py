from __future__ import annotations

import uuid


def new_id() -> str:
    """Random 36-char UUID string used as primary key for tenant documents."""
    return str(uuid.uuid4())


def pricing_id(store_id: str, product_id: str) -> str:
    return f"{store_id}_{product_id}"
