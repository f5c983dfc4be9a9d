"""A bouncing-ball platformer in three variants and the 2D graphics, sprite and sound toolkit it runs on."""

__version__ = "1.0.0"