"""AI Ad Engine - batch generation of testimonial video ads from briefs."""

__version__ = "0.1.0"
