"""envsetup - interactive .env setup from a .env.example template."""

__version__ = "0.3.0"
