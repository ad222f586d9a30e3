"""
Venue recommendation core.

Turns a user's review, check-in and follow history into a preference
profile and ranks candidate venues against it.
"""
