"""
Business services for the rentals service.

- booking.py: booking lifecycle operations and service wiring
- connection.py: WebSocket connection registry
- invoice.py: invoice renderer collaborator and download URLs
- notifier.py: per-user real-time notifications
"""

__all__: list[str] = []
