"""Normalization layer - loosely typed records into typed values."""

from __future__ import annotations

from schema_marshal.normalization.normalizer import TypeNormalizer, coercion_for_hint

__all__ = ["TypeNormalizer", "coercion_for_hint"]
