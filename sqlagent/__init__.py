"""
Certainti SQL Agent

Natural language question answering over the Certainti MySQL schema.
"""

__version__ = "0.1.0"
