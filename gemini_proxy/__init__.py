"""
Gemini Proxy

Server-side relay that forwards chat prompts to the Google Generative
Language API and streams the output back as Server-Sent Events.
"""

__version__ = "1.0.0"
