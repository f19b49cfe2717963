"""
ManoSetu Infrastructure Layer

External integrations: database, media-transport credential
signing, metrics and error tracking.
All infrastructure components implement abstract interfaces for testability.
"""
