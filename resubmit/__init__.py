"""resubmit: follow-up and retry submission for session-based execution."""
