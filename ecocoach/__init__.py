"""EcoCoach: scored sustainability profiles with search-first recommendations."""

__version__ = "0.1.0"
