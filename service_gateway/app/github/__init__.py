"""
GitHub routes of the gateway: models, handlers and router wiring.
"""
