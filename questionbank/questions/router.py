"""
Question Router

This module exports the router from the question controller module.
"""

from questionbank.common.logger import get_logger
from questionbank.questions.controller import router

logger = get_logger(__name__)
logger.debug(f"Question router loaded with {len(router.routes)} routes")

__all__ = ['router']
