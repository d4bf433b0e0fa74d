"""Map catalog country names (Czech or English, current or historical) to ISO codes."""

import logging
from collections.abc import Iterable

from kinolink.utils.text import fold_text

logger = logging.getLogger(__name__)

# Keys are folded and have no spaces, so "Rakousko-Uhersko" and
# "Austria Hungary" share a key. Historical states use their ISO 3166-3
# alpha-2 codes where one exists (CS, SU, YU, DD) and the user-assigned
# XM / XR for the Protectorate and the Third Reich.
_NAMES = {
    "CZ": ["Česko", "Česká republika", "Czechia", "Czech Republic"],
    "SK": ["Slovensko", "Slovakia", "Slovak Republic"],
    "CS": ["Československo", "ČSSR", "ČSR", "Czechoslovakia"],
    "XM": [
        "Protektorát Čechy a Morava",
        "Protectorate of Bohemia and Moravia",
        "Bohemia and Moravia",
    ],
    "AH": ["Rakousko-Uhersko", "Austria-Hungary", "Austro-Hungarian Empire"],
    "AT": ["Rakousko", "Austria"],
    "HU": ["Maďarsko", "Hungary"],
    "PL": ["Polsko", "Poland"],
    "DE": [
        "Německo",
        "Spolková republika Německo",
        "Západní Německo",
        "Německé císařství",
        "Germany",
        "West Germany",
        "German Empire",
    ],
    "DD": ["Německá demokratická republika", "NDR", "Východní Německo", "East Germany"],
    "XR": ["Německá říše", "Třetí říše", "Third Reich", "German Reich", "Nazi Germany"],
    "SU": ["SSSR", "Sovětský svaz", "Soviet Union", "USSR"],
    "RU": ["Rusko", "Ruská federace", "Russia"],
    "UA": ["Ukrajina", "Ukraine"],
    "BY": ["Bělorusko", "Belarus"],
    "YU": ["Jugoslávie", "Yugoslavia"],
    "SI": ["Slovinsko", "Slovenia"],
    "HR": ["Chorvatsko", "Croatia"],
    "RS": ["Srbsko", "Serbia"],
    "BA": ["Bosna a Hercegovina", "Bosnia and Herzegovina"],
    "MK": ["Severní Makedonie", "Makedonie", "North Macedonia"],
    "BG": ["Bulharsko", "Bulgaria"],
    "RO": ["Rumunsko", "Romania"],
    "GR": ["Řecko", "Greece"],
    "TR": ["Turecko", "Turkey"],
    "US": ["USA", "Spojené státy", "Spojené státy americké", "United States", "United States of America"],
    "CA": ["Kanada", "Canada"],
    "MX": ["Mexiko", "Mexico"],
    "AR": ["Argentina"],
    "BR": ["Brazílie", "Brazil"],
    "CL": ["Chile"],
    "CO": ["Kolumbie", "Colombia"],
    "CU": ["Kuba", "Cuba"],
    "GB": ["Velká Británie", "Spojené království", "United Kingdom", "Great Britain", "UK"],
    "IE": ["Irsko", "Ireland"],
    "FR": ["Francie", "France"],
    "BE": ["Belgie", "Belgium"],
    "NL": ["Nizozemsko", "Holandsko", "Netherlands"],
    "LU": ["Lucembursko", "Luxembourg"],
    "CH": ["Švýcarsko", "Switzerland"],
    "IT": ["Itálie", "Italy"],
    "ES": ["Španělsko", "Spain"],
    "PT": ["Portugalsko", "Portugal"],
    "DK": ["Dánsko", "Denmark"],
    "SE": ["Švédsko", "Sweden"],
    "NO": ["Norsko", "Norway"],
    "FI": ["Finsko", "Finland"],
    "IS": ["Island", "Iceland"],
    "EE": ["Estonsko", "Estonia"],
    "LV": ["Lotyšsko", "Latvia"],
    "LT": ["Litva", "Lithuania"],
    "GE": ["Gruzie", "Georgia"],
    "AM": ["Arménie", "Armenia"],
    "IL": ["Izrael", "Israel"],
    "PS": ["Palestina", "Palestine"],
    "LB": ["Libanon", "Lebanon"],
    "IR": ["Írán", "Iran"],
    "EG": ["Egypt"],
    "MA": ["Maroko", "Morocco"],
    "TN": ["Tunisko", "Tunisia"],
    "ZA": ["Jihoafrická republika", "South Africa"],
    "NG": ["Nigérie", "Nigeria"],
    "SN": ["Senegal"],
    "UG": ["Uganda"],
    "IN": ["Indie", "India"],
    "NP": ["Nepál", "Nepal"],
    "CN": ["Čína", "China"],
    "HK": ["Hongkong", "Hong Kong"],
    "TW": ["Tchaj-wan", "Taiwan"],
    "JP": ["Japonsko", "Japan"],
    "KR": ["Jižní Korea", "South Korea"],
    "KP": ["Severní Korea", "North Korea"],
    "TH": ["Thajsko", "Thailand"],
    "VN": ["Vietnam"],
    "PH": ["Filipíny", "Philippines"],
    "ID": ["Indonésie", "Indonesia"],
    "SG": ["Singapur", "Singapore"],
    "MY": ["Malajsie", "Malaysia"],
    "AU": ["Austrálie", "Australia"],
    "NZ": ["Nový Zéland", "New Zealand"],
}


def _key(name: str) -> str:
    return fold_text(name.replace("-", " ")).replace(" ", "")


COUNTRY_CODES = {_key(name): code for code, names in _NAMES.items() for name in names}


def country_code(name: str | None) -> str | None:
    """
    ISO alpha-2 code for one country name.

    Unmapped two-letter input is taken to be a code already and is only
    upper-cased. Other unknown names return None.
    """
    if not name or not name.strip():
        return None

    stripped = name.strip()
    code = COUNTRY_CODES.get(_key(stripped))
    if code is None and len(stripped) == 2 and stripped.isalpha():
        return stripped.upper()
    return code


def country_codes(names: Iterable[str] | None) -> list[str]:
    """
    Map country names to ISO alpha-2 codes.

    Order is kept, duplicates are dropped and unknown names are skipped:
    ["USA", "Spojené státy", "Československo"] → ["US", "CS"]
    """
    codes: list[str] = []
    for name in names or []:
        code = country_code(name)
        if code is None:
            if name and name.strip():
                logger.debug(f"No country code for {name!r}")
            continue
        if code not in codes:
            codes.append(code)
    return codes
