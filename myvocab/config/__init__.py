"""Configuration module for MyVocab."""

from .settings import Config

__all__ = ['Config']
