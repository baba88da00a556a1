"""Guardian check-in / pick-up system package.

Organized by feature modules (attendance, children, notifications, qr, ...)
with a thin Flask controller layer over service/repository layers.
"""
