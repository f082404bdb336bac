"""
Solace Extraction Module
Turns a user message into emotion labels and a needs assessment
"""

from .classifier import Classifier, KeywordClassifier, NeedsAssessment
from .model_classifier import ModelClassifier

__all__ = ['Classifier', 'KeywordClassifier', 'ModelClassifier', 'NeedsAssessment']
