"""Affiliate Recon: reconcile campaign summary and user ledger exports."""
