"""HR management backend package.

This package is organized by feature modules (employees, attendance, ledger, orders, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
