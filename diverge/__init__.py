"""
Diverge: compare two directory trees and merge files from left to right.
"""

__version__ = "1.0.0"
