"""
Question Bank API

This package provides a CRUD API for polymorphic assessment questions.

The platform features:
1. Four question types (MCQ, programming, descriptive and image-based), each
   with its own content shape and validation rules
2. Paginated listing with filtering by type, category, difficulty,
   visibility and tags
3. Interchangeable storage: in-memory or SQL through SQLAlchemy

The application is built by ``questionbank.main.create_app``.
"""

__version__ = "1.0.0"
