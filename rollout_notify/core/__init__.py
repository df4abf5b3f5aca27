"""Core building blocks: settings, errors, durations, notifications."""
