# Services package init
"""
TerpTaster Backend - Services Layer
===================================

What:  Business logic between routes (HTTP) and the database / file system.

Service Inventory:
    - scoring:          pure terpene match scorers (per-terpene and per-flavor)
    - terpene_dataset:  terpene reference data and the flavor → terpene index
    - training:         terp training game rules
    - review_service:   review CRUD, search, statistics
    - photo_service:    photo validation, WebP re-encoding and storage
"""
