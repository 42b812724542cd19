# Schemas package init
"""
TerpTaster Backend - Pydantic Schemas
=====================================

    - terpene.py:   reference data, score requests and score cards (camelCase wire names)
    - training.py:  training game questions, guesses and hints
    - review.py:    reviews, search, stats and uploads (snake_case wire names)
    - common.py:    error envelope, health and root banner
"""
