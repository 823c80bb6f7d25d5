"""Call Coaching Backend - upload, transcribe, analyze and coach contact-center calls."""

__version__ = "0.1.0"
