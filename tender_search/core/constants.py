"""Application constants."""

# Display formatting
SEPARATOR_LINE = "=" * 60
SEPARATOR_LINE_THIN = "-" * 40

# Source identifiers
SOURCE_BOAMP = "boamp"
SOURCE_TED = "ted"
SOURCE_PLACE_MARCHE = "place_marche"
SOURCE_AWS = "aws"
SOURCE_E_MARCHESPUBLICS = "e_marchespublics"
SOURCE_MEGALIS = "megalis"
SOURCE_KLEKOON = "klekoon"
SOURCE_INTERNAL = "internal"

# Per-source outcome status values
OUTCOME_OK = "ok"
OUTCOME_UNAVAILABLE = "unavailable"
OUTCOME_ERROR = "error"
OUTCOME_TIMEOUT = "timeout"
OUTCOME_CANCELLED = "cancelled"

DEFAULT_CURRENCY = "EUR"
