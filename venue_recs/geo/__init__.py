"""
Geospatial helpers.

Responsibilities:
- Great-circle distances between coordinates (single and vectorised).
- Bounding boxes, coordinate validation and meeting-point search radius.
- Rounding check-ins into coarse location clusters.
"""
