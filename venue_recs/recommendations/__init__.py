"""
Personalised venue recommendation engine.

Responsibilities:
- Extract a preference profile from a user's reviews, check-ins and follows.
- Score candidate venues against that profile and the request context.
- Rank, truncate and explain the results.
- Find venues similar to a reference venue.
"""
