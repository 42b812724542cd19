# Routes package init
"""
TerpTaster Backend - API Routes Package
=======================================

What:  HTTP route handlers. Thin: extract input, call a service, set headers.

Route Inventory:
    - health.py:    GET  /                          (API banner)
                    GET  /health                    (service health check)
    - scoring.py:   POST /api/score/terpenes        (per-terpene score card)
                    POST /api/score/palate          (per-flavor score card)
    - terpenes.py:  GET  /api/terpenes[/names|/flavors|/popular|/{name}]
                    POST /api/terpenes/expected-flavors
    - training.py:  GET  /api/training/question, GET /api/training/hint
                    POST /api/training/guess
    - reviews.py:   /api/reviews, /api/basic-reviews, /api/search, /api/stats
    - uploads.py:   POST /api/upload, GET /uploads/{filename}
"""
