# planet_generator/errors.py


class PlanetConfigError(ValueError):
    """Raised when planet settings are missing, malformed or out of range."""
