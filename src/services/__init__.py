"""
Suggestion Bot - Services Package
=================================

Backend services for suggestion intake, voting and moderation.
"""
