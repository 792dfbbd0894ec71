from typing import Final

# physical constants
PROTON: Final[float] = 1.007276466879  # proton mass in Da

# mass comparison
MASS_EQUALITY_EPSILON: Final[float] = 1e-10

# isotopic distribution defaults
DEFAULT_RESOLUTION: Final[float] = 0.01
DEFAULT_MIN_INTENSITY: Final[float] = 1e-10
DEFAULT_MIN_P: Final[float] = 0.0

# hill notation
CARBON: Final[str] = "C"
HYDROGEN: Final[str] = "H"

# reference data
ELEMENTS_FILENAME: Final[str] = "elements.json"
VALIDATION_PASSED: Final[str] = "Validation passed"
