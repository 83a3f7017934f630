"""Universal Ledger CLI — user-owned ledger records compiled into context blocks."""

VERSION = "0.1.0"
SOURCE = "Universal Ledger CLI"
