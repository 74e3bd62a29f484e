"""Event type constants.

Learn: Centralizing event types as constants prevents typos and
makes it easy to discover every kind of state change the audit
trail can contain.
"""

# ─── Accounts ────────────────────────────────────────────

USER_REGISTERED = "user.registered"
ACCOUNT_DELETED = "account.deleted"

# ─── Courses ─────────────────────────────────────────────

COURSE_CREATED = "course.created"
COURSE_UPDATED = "course.updated"
COURSE_DELETED = "course.deleted"

# ─── Enrollment ──────────────────────────────────────────

ENROLLMENT_CREATED = "enrollment.created"
