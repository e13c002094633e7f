"""Heuristic evaluations of extracted architectural models."""

from .structural import StructuralEvaluation, evaluate_structure

__all__ = ['StructuralEvaluation', 'evaluate_structure']
