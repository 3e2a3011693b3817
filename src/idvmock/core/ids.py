from __future__ import annotations

import secrets


def generate_id(prefix: str = "") -> str:
    """Generate 32 random hex characters, optionally as ``<prefix>_<hex>``."""
    random_hex = secrets.token_hex(16)
    return f"{prefix}_{random_hex}" if prefix else random_hex


def new_account_id() -> str:
    return generate_id("acc")


def new_workflow_execution_id() -> str:
    return generate_id("wfe")
