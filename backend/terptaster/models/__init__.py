# Models package init
"""
TerpTaster Backend - SQLAlchemy Models
======================================

    - review.py:  `weed_reviews` table (Review)
"""
