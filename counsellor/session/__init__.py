"""Session orchestration."""

from counsellor.session.lifecycle import SessionLifecycle, SessionSummary

__all__ = ["SessionLifecycle", "SessionSummary"]
