"""Workforce and financial trend forecasting from DART disclosures."""
