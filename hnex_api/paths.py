"""Unique storage paths for uploaded files."""

from __future__ import annotations

import uuid


def gen_unique_path(name: str) -> str:
    """A fresh path under ``assets/`` that keeps the extension of ``name``."""
    _, dot, ext = name.rsplit("/", 1)[-1].rpartition(".")
    return f"assets/{uuid.uuid4()}{dot}{ext}"