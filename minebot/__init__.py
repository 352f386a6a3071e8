"""minebot: an autonomous agent that plays Minecraft Bedrock through a reasoning service."""

__version__ = "2.0.0"
