"""
Demo Data Module
"""
from .generators import DemoDataGenerator

__all__ = [
    "DemoDataGenerator",
]
