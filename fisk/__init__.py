"""Fiscal invoice PDF generator for RegisterInvoice request/response pairs."""

__version__ = "0.3.0"
