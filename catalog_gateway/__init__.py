"""Catalog gateway: product catalog API with retrieval-backed search."""
