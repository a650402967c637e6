"""Notice board backend: notices, comments, notifications and live updates."""
