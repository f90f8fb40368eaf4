"""Keyword to axis weight table used to score ballots from their titles.

A ballot title matching a keyword (substring, case-insensitive) moves each
listed axis by the given weight. Positive weights point to the right/liberal
end of an axis, negative weights to the left/interventionist end.
"""

from types import MappingProxyType
from typing import Iterator, Mapping

from parlascope.services.axes import AXES


class KeywordAxisTable:
    """Immutable keyword -> {axis: weight} mapping.

    Keywords are stored lower-cased. Insertion order is kept so that scoring
    traverses keywords deterministically.
    """

    def __init__(self, entries: Mapping[str, Mapping[str, float]]):
        table = {}
        for keyword, weights in entries.items():
            unknown = set(weights) - set(AXES)
            if unknown:
                raise ValueError(f"Unknown axes for keyword {keyword!r}: {sorted(unknown)}")
            table[keyword.lower()] = MappingProxyType(dict(weights))
        self._entries = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, keyword: str) -> bool:
        return keyword.lower() in self._entries

    def weights(self, keyword: str) -> Mapping[str, float]:
        return self._entries[keyword.lower()]

    def match(self, title: str) -> list[tuple[str, Mapping[str, float]]]:
        """Return every (keyword, weights) pair whose keyword occurs in ``title``."""
        text = title.lower()
        return [(kw, weights) for kw, weights in self._entries.items() if kw in text]


DEFAULT_KEYWORD_TABLE = KeywordAxisTable({
    # Économie
    "taxe": {"economie": -30},
    "impôt": {"economie": -40},
    "budget": {"economie": 20},
    "privatisation": {"economie": 80},
    "nationalisation": {"economie": -80},
    "smic": {"social": -60, "economie": -40},
    "entreprise": {"economie": 30},
    "libéralisation": {"economie": 70},
    "régulation": {"economie": -50},

    # Social
    "retraite": {"social": 40},
    "apl": {"social": -50},
    "allocations": {"social": -40},
    "solidarité": {"social": -50},
    "chômage": {"social": -30},
    "santé": {"social": -20},
    "hôpital": {"social": -30},
    "protection sociale": {"social": -60},

    # Écologie
    "carbone": {"ecologie": -60, "economie": -20},
    "climat": {"ecologie": -70},
    "nucléaire": {"ecologie": 40},
    "énergies renouvelables": {"ecologie": -60},
    "biodiversité": {"ecologie": -50},
    "pollution": {"ecologie": -40},
    "transport": {"ecologie": -30},
    "pesticide": {"ecologie": -60},

    # Sécurité
    "police": {"securite": 60},
    "sécurité": {"securite": 50},
    "surveillance": {"securite": 70},
    "terrorisme": {"securite": 60},
    "peine": {"securite": 50},
    "prison": {"securite": 40},
    "libertés": {"securite": -50},
    "vie privée": {"securite": -60},

    # Europe
    "europe": {"europe": 50},
    "européen": {"europe": 40},
    "bruxelles": {"europe": 30},
    "traité": {"europe": 50},
    "souveraineté": {"europe": -60},

    # Immigration
    "immigration": {"immigration": 50},
    "étranger": {"immigration": 40},
    "asile": {"immigration": -40},
    "frontière": {"immigration": 50},
    "expulsion": {"immigration": 70},
    "régularisation": {"immigration": -60},
    "naturalisation": {"immigration": -40},

    # Institutions
    "constitution": {"institutions": 30},
    "référendum": {"institutions": -40},
    "parlement": {"institutions": 20},
    "décentralisation": {"institutions": -30},
    "réforme institutionnelle": {"institutions": -50},

    # International
    "défense": {"international": 50},
    "otan": {"international": 50},
    "armée": {"international": 40},
    "intervention": {"international": 30},
    "multilatéral": {"international": -40},
    "onu": {"international": -30},
})
