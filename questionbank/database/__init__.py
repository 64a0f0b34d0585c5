"""
Database Module

This module provides database configuration and models for the question bank.
"""

from questionbank.database.base import Base, ModelBase, metadata

__all__ = ['Base', 'ModelBase', 'metadata']
