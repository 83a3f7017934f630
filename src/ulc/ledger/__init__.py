"""Ledger records — one user-owned JSON document per ledger id (LID).

Layout:
    ~/.ulc/ledger/
    ├── 2026-01-01-TEST.json      # <lid>.json, UTF-8, 2-space indent
    └── 2025-12-21-CODA.json

Records are loaded raw, hard-validated, then coerced into a typed
``LedgerRecord``; malformed optional fields are treated as absent.
"""
