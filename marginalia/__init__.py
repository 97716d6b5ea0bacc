"""Marginalia: the annotation lifecycle and activity-tracking core of an
annotation sidebar."""
