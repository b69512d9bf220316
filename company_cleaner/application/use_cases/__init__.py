"""Application use cases"""

from .clean_page import CleanPageInput, CleanPageOutput, CleanPageUseCase

__all__ = [
    "CleanPageInput",
    "CleanPageOutput",
    "CleanPageUseCase",
]
