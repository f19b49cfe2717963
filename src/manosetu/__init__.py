"""
ManoSetu - Therapy Session Backend

This package provides the backend services for ManoSetu's
therapist booking flow: scheduling, session lifecycle and
video room credentials.

IMPORTANT: Therapist time is a shared resource.
No two active sessions may ever overlap for the same therapist.
"""

__version__ = "0.1.0"
__author__ = "ManoSetu Engineering Team"
