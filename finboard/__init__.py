"""Core (UI-agnostic) budget and ratio dashboard logic.

This package contains:
- delimited-text parsing and header/label-column location
- value coercion and the line-item label index
- ratio / percentage derivation with threshold classification
- data loading (CSV / JSON / XLSX -> documents and pandas frames)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
