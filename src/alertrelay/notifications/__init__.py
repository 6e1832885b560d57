"""
Notification channels (Telegram, in-memory).

Do not import the factory or adapters here.
"""
