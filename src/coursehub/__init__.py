"""Coursehub — course marketplace backend.

Instructors publish courses, students browse and enroll. This package
holds the authorization and state-integrity core: identities and
sessions, course ownership, idempotent enrollment, and the account
deletion cascade.
"""

__version__ = "0.1.0"
