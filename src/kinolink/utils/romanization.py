"""Czech transcriptions of Japanese and Korean names to English romanization.

The catalog writes East Asian names the way Czech readers pronounce them
(Polívka transcription for Japanese, a Czech phonetic spelling for Korean).
International services use modified Hepburn and Revised Romanization, so
"Tacuja Jošihara" has to become "Tatsuya Yoshihara" before it can be compared.

Rules are applied longest-match-first, left to right, on lowercased text.
"""

# Czech Polívka transcription -> modified Hepburn.
# Multi-character clusters must precede the single-character rules.
JAPANESE_RULES: tuple[tuple[str, str], ...] = (
    ("šú", "shū"),
    ("šó", "shō"),
    ("čó", "chō"),
    ("čú", "chū"),
    ("džú", "jū"),
    ("džó", "jō"),
    ("cú", "tsū"),
    ("rjú", "ryū"),
    ("rjó", "ryō"),
    ("kjú", "kyū"),
    ("kjó", "kyō"),
    ("gjú", "gyū"),
    ("gjó", "gyō"),
    ("njú", "nyū"),
    ("njó", "nyō"),
    ("mjú", "myū"),
    ("mjó", "myō"),
    ("hjú", "hyū"),
    ("hjó", "hyō"),
    ("bjú", "byū"),
    ("bjó", "byō"),
    ("pjú", "pyū"),
    ("pjó", "pyō"),
    ("dži", "ji"),
    ("džu", "ju"),
    ("dže", "je"),
    ("džo", "jo"),
    ("dža", "ja"),
    ("ša", "sha"),
    ("ši", "shi"),
    ("šu", "shu"),
    ("še", "she"),
    ("šo", "sho"),
    ("ča", "cha"),
    ("či", "chi"),
    ("ču", "chu"),
    ("če", "che"),
    ("čo", "cho"),
    ("cu", "tsu"),
    ("ca", "tsa"),
    ("ce", "tse"),
    ("co", "tso"),
    ("ci", "tsi"),
    *(
        (f"{consonant}j{vowel}", f"{consonant}y{vowel}")
        for consonant in ("r", "k", "g", "n", "m", "h", "b", "p")
        for vowel in ("a", "i", "u", "e", "o")
    ),
    ("jú", "yū"),
    ("jó", "yō"),
    ("ja", "ya"),
    ("ji", "yi"),
    ("ju", "yu"),
    ("je", "ye"),
    ("jo", "yo"),
    # Long vowels
    ("ó", "ō"),
    ("ú", "ū"),
)

# Czech phonetic spelling -> Revised Romanization of Korean.
# No "dž" rule: in Korean names it stays literal.
KOREAN_RULES: tuple[tuple[str, str], ...] = (
    ("šin", "sin"),
    ("šim", "sim"),
    ("ča", "ja"),
    ("čo", "jo"),
    ("ču", "ju"),
    ("če", "je"),
    ("či", "ji"),
    ("š", "s"),
    ("č", "j"),
    ("ů", "u"),
)


def apply_rules(text: str, rules: tuple[tuple[str, str], ...]) -> str:
    """
    Substitute rule patterns in a single left-to-right pass.

    At each position the first rule (in table order) that matches wins,
    and scanning resumes after the consumed characters.

    Args:
        text: Lowercased input
        rules: Ordered (pattern, replacement) pairs

    Returns:
        Text with substitutions applied
    """
    if not text or not text.strip():
        return text

    result: list[str] = []
    i = 0
    while i < len(text):
        for pattern, replacement in rules:
            if text.startswith(pattern, i):
                result.append(replacement)
                i += len(pattern)
                break
        else:
            result.append(text[i])
            i += 1

    return "".join(result)


def japanese_to_hepburn(name: str) -> str:
    """Convert a lowercased Polívka-transcribed Japanese name to Hepburn."""
    return apply_rules(name, JAPANESE_RULES)


def korean_to_revised(name: str) -> str:
    """Convert a lowercased Czech-spelled Korean name to Revised Romanization."""
    return apply_rules(name, KOREAN_RULES)


def transliterate(name: str) -> str:
    """
    Rewrite a Czech-transcribed East Asian name in English romanization.

    The Japanese table is tried first; the Korean table only runs when the
    Japanese one changed nothing. Plain ASCII input is returned as is, so
    Western names such as "martin scorsese" are never rewritten.

    Args:
        name: Lowercased name

    Returns:
        Transliterated name, or the input when no rule applies
    """
    if not name or name.isascii():
        return name

    japanese = japanese_to_hepburn(name)
    if japanese != name:
        return japanese

    return korean_to_revised(name)
