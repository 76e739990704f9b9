"""Storefront checkout core — carts, payments and order materialization."""
