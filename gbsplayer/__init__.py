"""Game Boy sound player toolkit: playback logic, mappers, impulse tables and output plugins."""

__version__ = "0.1.0"