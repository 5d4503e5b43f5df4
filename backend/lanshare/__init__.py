"""LAN file sharing server: devices, files, transfers and messages with live updates."""

__version__ = "0.1.0"
