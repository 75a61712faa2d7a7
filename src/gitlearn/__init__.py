"""
GitLearn Backend - Learning records backed by a GitHub repository

Stores learning records (title, explanation, understanding level, tags,
category) and lets each one point at a file that lives in the user's
GitHub repository instead of the application database.

Author: Cosmo D'Antuono
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Cosmo D'Antuono"
__email__ = "cosmo.dantuono@gmail.com"
