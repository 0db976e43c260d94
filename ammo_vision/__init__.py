"""Ammo Vision - read a game's ammo counter from screenshots."""

__version__ = "0.1.0"
