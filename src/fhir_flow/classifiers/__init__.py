"""
Document classification for incoming envelopes.
"""

from .document_classifier import IngestionClassifier, detect_doc_type, generate_document_id

__all__ = ["IngestionClassifier", "detect_doc_type", "generate_document_id"]
