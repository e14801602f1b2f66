"""Core vault machinery: addressing, scanning, population, orchestration."""
