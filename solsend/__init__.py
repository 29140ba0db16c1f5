"""solsend - native SOL transfer tool"""

__version__ = "0.1.0"
