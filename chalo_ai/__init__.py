"""
Chalo India Chatbot - customer support and flight booking assistant
for travel between India and Australia.
"""

__version__ = "1.0.0"
