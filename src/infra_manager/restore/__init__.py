"""Restoring shoots from backups taken before risky mutations."""
