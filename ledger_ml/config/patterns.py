"""Banking boilerplate patterns, stopwords and amount buckets."""

import re

_DATE = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"

# Applied in order to the lowercased description. Only operation references,
# dates and times are removed; card, account and contract numbers are kept.
BOILERPLATE_PATTERNS: list[re.Pattern[str]] = [
    # RIF:149304229, Rif. 12345
    re.compile(r"\brif\s*[:.]?\s*\d+"),
    # PROT 123, protocollo: 456
    re.compile(r"\bprot(?:ocol+o)?\s*[:.]?\s*\d+"),
    # "operazione carta 04035323 del 15/01/2025" must go before the bare dates
    re.compile(rf"operazione\s+carta\s+\d{{5,10}}\s+del\s+{_DATE}"),
    re.compile(rf"\bvs\s+fattura\s+n(?:r|um)?\s*\.?\s*\d+\s+del\s+{_DATE}"),
    re.compile(rf"\bdel\s+{_DATE}"),
    re.compile(rf"\b{_DATE}\b"),
    re.compile(r"\b\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}\b"),
    # 08:14, 08:14:55
    re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\b"),
    re.compile(r"\bben\.\s*"),
]

# "Disposizione - ..." prefix, matched after the boilerplate is gone
DISPOSITION_PREFIX = re.compile(r"^\s*disposizione\s*-?\s*")

PUNCTUATION = re.compile(r"[.,:;]+")
WHITESPACE = re.compile(r"\s+")
NUMERIC_ONLY = re.compile(r"^\d+$")

# Coarse rule-suggestion pattern: digits and separators removed
SUGGESTION_STRIP = re.compile(r"[0-9.,/\-]+")

STOPWORDS: frozenset[str] = frozenset(
    {
        # Articles, prepositions, conjunctions
        "di", "da", "a", "per", "con", "su", "in", "tra", "fra",
        "il", "lo", "la", "i", "gli", "le", "un", "uno", "una",
        "del", "dello", "della", "dei", "degli", "delle",
        "al", "allo", "alla", "ai", "agli", "alle",
        "dal", "dallo", "dalla", "dai", "dagli", "dalle",
        "nel", "nello", "nella", "nei", "negli", "nelle",
        "sul", "sullo", "sulla", "sui", "sugli", "sulle",
        "e", "ed", "che", "chi", "cui", "dove", "quando", "come", "quanto",
        "quale", "cosa",
        # Banking vocabulary with no classification signal
        "disposizione", "bonifico", "bancomat", "pagamento", "addebito",
        "accredito", "giroconto", "eur", "euro", "saldo", "fattura", "vostra",
        "nostra", "nr", "num", "numero", "spese", "commissioni", "canone",
        "rata", "acconto",
    }
)  # fmt: skip

MIN_TOKEN_LENGTH = 3

# (upper bound inclusive, bucket, label); anything above the last bound is xlarge
AMOUNT_BUCKETS: list[tuple[float, str, str]] = [
    (10, "micro", "0-10€"),
    (50, "small", "10-50€"),
    (150, "medium", "50-150€"),
    (500, "large", "150-500€"),
]
XLARGE_BUCKET = ("xlarge", "500+€")
