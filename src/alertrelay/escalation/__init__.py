"""
On-call escalation engine: schedule store, scheduler, call attempt controller.

Do not import the factory here; it pulls in configuration at import time.
"""
