"""
Solace Orchestration Module
Pipeline composition, response validation and context enhancement
"""

from .enhancer import ContextEnhancer, EnhancementBundle
from .orchestrator import CrisisAlert, CrisisSink, LoggingCrisisSink, ProcessedMessage, SolaceOrchestrator
from .validator import ResponseValidator, ValidationResult

__all__ = [
    'SolaceOrchestrator',
    'ProcessedMessage',
    'CrisisSink',
    'CrisisAlert',
    'LoggingCrisisSink',
    'ContextEnhancer',
    'EnhancementBundle',
    'ResponseValidator',
    'ValidationResult',
]
