"""Core (UI-agnostic) dashboard logic.

This package contains:
- value normalization (PT-BR numbers, spreadsheet serial and DD/MM/YYYY dates)
- column inference and date-range presets
- row filtering and chart re-aggregation
- page compute functions (JSON-serializable payloads)
- CSV export helpers
"""
