"""Pure domain value objects shared by every workshop module."""
