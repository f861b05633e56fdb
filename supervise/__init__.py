"""
supervise: run a command under a deadline and tear down its whole process
group when the deadline passes.
"""

__version__ = "1.0.0"
