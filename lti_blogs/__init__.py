"""
Runtime will load the launch hook from here.
"""

__version__ = '1.0.0'
