"""CPV codes and regions offered as search filters.

CPV (Common Procurement Vocabulary) codes are used in EU public procurement
to classify the subject of contracts.
"""

import re
from typing import List, Optional

_CPV_CODE_PATTERN = re.compile(r"^\d{1,8}$")

# Commonly searched CPV codes (labels as shown to French users)
CPV_CODES = {
    # Services informatiques
    "72000000": "Services de TI: conseil, développement de logiciels, Internet et assistance",
    "72200000": "Services de programmation et de conseil en logiciels",
    "72300000": "Services de système de données",
    "72400000": "Services Internet",
    # Construction
    "45000000": "Travaux de construction",
    "45200000": "Travaux de construction complète ou partielle et travaux de génie civil",
    "45300000": "Travaux d'équipement du bâtiment",
    # Fournitures de bureau
    "30000000": "Machines, équipements et fournitures de bureau et d'informatique",
    "30100000": "Machines, équipements et fournitures de bureau, excepté ordinateurs",
    "30200000": "Matériel et fournitures informatiques",
    # Services professionnels
    "79000000": "Services aux entreprises: droit, marketing, conseil, recrutement",
    "79100000": "Services juridiques",
    "79200000": "Services de comptabilité, d'audit et de fiscalité",
    "79400000": "Conseils en affaires et en gestion et services connexes",
    # Formation
    "80000000": "Services d'enseignement et de formation",
    "80400000": "Services d'enseignement pour adultes et autres services",
    "80500000": "Services de formation",
}

FRENCH_REGIONS = [
    "Auvergne-Rhône-Alpes",
    "Bourgogne-Franche-Comté",
    "Bretagne",
    "Centre-Val de Loire",
    "Corse",
    "Grand Est",
    "Hauts-de-France",
    "Île-de-France",
    "Normandie",
    "Nouvelle-Aquitaine",
    "Occitanie",
    "Pays de la Loire",
    "Provence-Alpes-Côte d'Azur",
    "Guadeloupe",
    "Martinique",
    "Guyane",
    "La Réunion",
    "Mayotte",
]


def normalize_cpv_code(code: str) -> str:
    """Normalize CPV code to 8-digit format without check digit.

    CPV codes can be:
    - 8 digits: 72200000
    - 8 digits + check digit: 72200000-7
    - Partial codes: 722

    Raises:
        ValueError: If the code is not numeric
    """
    code = str(code).split("-")[0].strip()
    if not _CPV_CODE_PATTERN.match(code):
        raise ValueError(f"Invalid CPV code: {code!r}")
    return code.ljust(8, "0")[:8]


def normalize_cpv_codes(codes: Optional[List[str]]) -> List[str]:
    """Normalize a list of codes, dropping blanks and duplicates (order kept)."""
    seen = set()
    result = []
    for raw in codes or []:
        if raw is None or not str(raw).strip():
            continue
        code = normalize_cpv_code(raw)
        if code not in seen:
            seen.add(code)
            result.append(code)
    return result


def get_cpv_code_description(code: str) -> Optional[str]:
    """Get the label of a known CPV code.

    Args:
        code: CPV code (any accepted format)

    Returns:
        Label or None if unknown or invalid
    """
    try:
        return CPV_CODES.get(normalize_cpv_code(code))
    except ValueError:
        return None
