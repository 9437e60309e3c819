"""FormRelay shared layer: contact and waitlist forms with transactional email."""

__version__ = "0.1.0"
