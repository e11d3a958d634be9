"""
Directory of verified websites for Israeli banks, brokers, pension funds and
investment platforms.

Recommendations list platforms as free text ("Bank Leumi", "Meitav Dash
investments", "מיטב").  ``find_platform_url()`` resolves that text to a
verified URL so the UI can link directly; ``None`` means the caller should
fall back to a web search link.

Lookup order
------------
1. exact key match on the lower-cased, stripped name
2. exact match after dropping filler words ("bank ", "investments", ...)
3. substring match in either direction, ignoring keys shorter than
   ``_MIN_FUZZY_KEY_LEN`` (so "ig" does not match "Migdal")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class PlatformCategory(StrEnum):
    BANK = "bank"
    BROKER = "broker"
    PENSION = "pension"
    CRYPTO = "crypto"
    P2P = "p2p"
    REAL_ESTATE = "realestate"
    OTHER = "other"


@dataclass(frozen=True)
class PlatformInfo:
    name: str
    url: str
    category: PlatformCategory


@dataclass(frozen=True)
class PlatformLink:
    """A platform mention paired with its verified URL (``None`` if unknown)."""

    name: str
    url: Optional[str]


def _entry(name: str, url: str, category: PlatformCategory) -> PlatformInfo:
    return PlatformInfo(name=name, url=url, category=category)


_B, _BR, _P = PlatformCategory.BANK, PlatformCategory.BROKER, PlatformCategory.PENSION

_LEUMI      = _entry("Bank Leumi", "https://www.leumi.co.il", _B)
_HAPOALIM   = _entry("Bank Hapoalim", "https://www.bankhapoalim.co.il", _B)
_DISCOUNT   = _entry("Discount Bank", "https://www.discountbank.co.il", _B)
_MIZRAHI    = _entry("Mizrahi Tefahot", "https://www.mizrahi-tefahot.co.il", _B)
_FIBI       = _entry("First International Bank", "https://www.fibi.co.il", _B)
_JERUSALEM  = _entry("Bank of Jerusalem", "https://www.bankjerusalem.co.il", _B)
_MASSAD     = _entry("Bank Massad", "https://www.bankmassad.co.il", _B)
_YAHAV      = _entry("Bank Yahav", "https://www.bank-yahav.co.il", _B)
_OTSAR      = _entry("Bank Otsar Ha-Hayal", "https://www.bankotsar.co.il", _B)
_PAGI       = _entry("Bank PAGI", "https://www.pagi.co.il", _B)
_MERCANTILE = _entry("Mercantile Bank", "https://www.mercantile.co.il", _B)

_MEITAV     = _entry("Meitav Dash", "https://www.meitavdash.co.il", _BR)
_ALTSHULER  = _entry("Altshuler Shaham", "https://www.as-invest.co.il", _BR)
_PSAGOT     = _entry("Psagot", "https://www.psagot.co.il", _BR)
_EXCELLENCE = _entry("Excellence", "https://www.xnes.co.il", _BR)
_LEADER     = _entry("Leader Capital Markets", "https://www.leadercm.com", _BR)
_MOR        = _entry("Mor Investments", "https://www.moreinvest.co.il", _BR)
_AYALON     = _entry("Ayalon Investments", "https://www.ayalon-invest.co.il", _BR)

_HAREL      = _entry("Harel", "https://www.harel-group.co.il", _P)
_MIGDAL     = _entry("Migdal", "https://www.migdal.co.il", _P)
_MENORA     = _entry("Menora Mivtachim", "https://www.menora.co.il", _P)
_CLAL       = _entry("Clal Insurance", "https://www.clalbit.co.il", _P)
_PHOENIX    = _entry("The Phoenix", "https://www.fnx.co.il", _P)

_BTB        = _entry("Be the Bank", "https://www.btbisrael.co.il", PlatformCategory.P2P)

# Keys are lower-case aliases (English and Hebrew) for the same institution.
PLATFORMS: dict[str, PlatformInfo] = {
    # Banks
    "leumi": _LEUMI,           "לאומי": _LEUMI,
    "hapoalim": _HAPOALIM,     "הפועלים": _HAPOALIM,
    "discount": _DISCOUNT,     "דיסקונט": _DISCOUNT,
    "mizrahi": _MIZRAHI,       "מזרחי": _MIZRAHI,
    "fibi": _FIBI,             "בינלאומי": _FIBI,
    "jerusalem": _JERUSALEM,   "ירושלים": _JERUSALEM,
    "massad": _MASSAD,         "מסד": _MASSAD,
    "yahav": _YAHAV,           "יהב": _YAHAV,
    "otsar": _OTSAR,           "אוצר החייל": _OTSAR,
    "pagi": _PAGI,             "פאגי": _PAGI,
    "mercantile": _MERCANTILE, "מרכנתיל": _MERCANTILE,
    # Brokers and investment houses
    "meitav": _MEITAV,         "מיטב": _MEITAV,
    "altshuler": _ALTSHULER,   "אלטשולר": _ALTSHULER,
    "psagot": _PSAGOT,         "פסגות": _PSAGOT,
    "excellence": _EXCELLENCE, "xnes": _EXCELLENCE, "אקסלנס": _EXCELLENCE,
    "ig": _entry("IG", "https://www.ig.com", _BR),
    "ibi": _entry("IBI", "https://www.ibi.co.il", _BR),
    "leader": _LEADER,         "לידר": _LEADER,
    "mor": _MOR,               "מור": _MOR,
    "ayalon": _AYALON,         "איילון": _AYALON,
    "etoro": _entry("eToro", "https://www.etoro.com", _BR),
    # Pension and insurance
    "harel": _HAREL,           "הראל": _HAREL,
    "migdal": _MIGDAL,         "מגדל": _MIGDAL,
    "menora": _MENORA,         "מנורה": _MENORA,
    "clal": _CLAL,             "כלל": _CLAL,
    "phoenix": _PHOENIX,       "fnx": _PHOENIX,     "פניקס": _PHOENIX,
    # Crypto (regulated only)
    "bits of gold": _entry("Bits of Gold", "https://www.bitsofgold.co.il", PlatformCategory.CRYPTO),
    "bit2c": _entry("Bit2C", "https://bit2c.co.il", PlatformCategory.CRYPTO),
    "coinmama": _entry("Coinmama", "https://www.coinmama.com", PlatformCategory.CRYPTO),
    # P2P lending
    "be the bank": _BTB,       "btb": _BTB,
    "blender": _entry("Blender", "https://www.blender.co.il", PlatformCategory.P2P),
    # Real estate and crowdfunding
    "fundit": _entry("Fundit", "https://www.fundit.co.il", PlatformCategory.REAL_ESTATE),
    "pipelbiz": _entry("Pipelbiz", "https://pipelbiz.com", PlatformCategory.REAL_ESTATE),
    "ourcrowd": _entry("OurCrowd", "https://www.ourcrowd.com", PlatformCategory.OTHER),
}

_FILLER_WORDS = ("bank of ", "bank ", "investments", "insurance", "בנק ", "השקעות", "ביטוח", "בית ")
_MIN_FUZZY_KEY_LEN = 3


def _clean(name: str) -> str:
    cleaned = name
    for word in _FILLER_WORDS:
        cleaned = cleaned.replace(word, "")
    return cleaned.strip()


def find_platform_url(platform_name: str) -> Optional[str]:
    """Return the verified URL for ``platform_name``, or ``None`` if unknown."""
    normalized = platform_name.lower().strip()
    if not normalized:
        return None

    if normalized in PLATFORMS:
        return PLATFORMS[normalized].url

    cleaned = _clean(normalized)
    if cleaned in PLATFORMS:
        return PLATFORMS[cleaned].url

    if len(cleaned) < _MIN_FUZZY_KEY_LEN:
        return None
    for key, platform in PLATFORMS.items():
        if len(key) < _MIN_FUZZY_KEY_LEN:
            continue
        if key in cleaned or cleaned in key:
            return platform.url

    return None


def parse_platform(platform_text: str) -> PlatformLink:
    return PlatformLink(name=platform_text, url=find_platform_url(platform_text))


def verified_platforms_count() -> int:
    """Number of distinct verified institutions (aliases counted once)."""
    return len({p.url for p in PLATFORMS.values()})
