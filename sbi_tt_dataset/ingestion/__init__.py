"""Extraction helpers turning SBI TT rate documents into rate mappings."""
