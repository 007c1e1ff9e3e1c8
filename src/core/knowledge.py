"""
Static knowledge tables used by the content analyzer.
Loaded once at import time and treated as read-only.
"""
import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel


class RegionEntry(BaseModel):
    """Geography a region keyword resolves to."""
    country: str
    continent: str
    city: Optional[str] = None
    state: Optional[str] = None

    model_config = {"frozen": True}


def _region(
    country: str,
    continent: str,
    city: Optional[str] = None,
    state: Optional[str] = None,
) -> RegionEntry:
    return RegionEntry(country=country, continent=continent, city=city, state=state)


CONTINENT_COUNTRIES: Dict[str, List[str]] = {
    "Asia": ["India", "China", "Bangladesh", "Vietnam", "Pakistan", "Sri Lanka", "Indonesia", "Turkey"],
    "Europe": ["United Kingdom", "Germany", "Italy", "France", "Spain", "Portugal"],
    "North America": ["United States"],
    "South America": ["Brazil"],
    "Africa": ["Ethiopia"],
    "Oceania": [],
    "Global": [],
}

REGION_KEYWORDS: Dict[str, RegionEntry] = {
    # India
    "tiruppur": _region("India", "Asia", "Tirupur", "Tamil Nadu"),
    "tirupur": _region("India", "Asia", "Tirupur", "Tamil Nadu"),
    "coimbatore": _region("India", "Asia", "Coimbatore", "Tamil Nadu"),
    "chennai": _region("India", "Asia", "Chennai", "Tamil Nadu"),
    "erode": _region("India", "Asia", "Erode", "Tamil Nadu"),
    "salem": _region("India", "Asia", "Salem", "Tamil Nadu"),
    "surat": _region("India", "Asia", "Surat", "Gujarat"),
    "ahmedabad": _region("India", "Asia", "Ahmedabad", "Gujarat"),
    "ludhiana": _region("India", "Asia", "Ludhiana", "Punjab"),
    "mumbai": _region("India", "Asia", "Mumbai", "Maharashtra"),
    "delhi": _region("India", "Asia", "Delhi-NCR"),
    "panipat": _region("India", "Asia", "Panipat", "Haryana"),
    "kolkata": _region("India", "Asia", "Kolkata", "West Bengal"),
    "ichalkaranji": _region("India", "Asia", "Ichalkaranji", "Maharashtra"),
    "bhilwara": _region("India", "Asia", "Bhilwara", "Rajasthan"),
    "kerala": _region("India", "Asia", state="Kerala"),
    "kochi": _region("India", "Asia", "Kochi", "Kerala"),

    # China
    "shaoxing": _region("China", "Asia", "Shaoxing", "Zhejiang"),
    "hangzhou": _region("China", "Asia", "Hangzhou", "Zhejiang"),
    "keqiao": _region("China", "Asia", "Keqiao", "Zhejiang"),
    "xiangshan": _region("China", "Asia", "Xiangshan", "Zhejiang"),
    "haiyang": _region("China", "Asia", "Haiyang", "Shandong"),
    "guangzhou": _region("China", "Asia", "Guangzhou", "Guangdong"),
    "shenzhen": _region("China", "Asia", "Shenzhen", "Guangdong"),
    "jiangsu": _region("China", "Asia", state="Jiangsu"),

    # Bangladesh
    "dhaka": _region("Bangladesh", "Asia", "Dhaka"),
    "chittagong": _region("Bangladesh", "Asia", "Chittagong"),
    "gazipur": _region("Bangladesh", "Asia", "Gazipur"),

    # Vietnam
    "ho chi minh": _region("Vietnam", "Asia", "Ho Chi Minh City"),
    "hanoi": _region("Vietnam", "Asia", "Hanoi"),

    # Turkey, grouped with Asia for textile trade reporting
    "istanbul": _region("Turkey", "Asia", "Istanbul"),
    "bursa": _region("Turkey", "Asia", "Bursa"),
    "denizli": _region("Turkey", "Asia", "Denizli"),

    # Europe
    "prato": _region("Italy", "Europe", "Prato"),
    "milan": _region("Italy", "Europe", "Milan"),
    "biella": _region("Italy", "Europe", "Biella"),
    "manchester": _region("United Kingdom", "Europe", "Manchester"),
    "leicester": _region("United Kingdom", "Europe", "Leicester"),
    "lyon": _region("France", "Europe", "Lyon"),
    "paris": _region("France", "Europe", "Paris"),
    "munich": _region("Germany", "Europe", "Munich"),

    # United States
    "dalton": _region("United States", "North America", "Dalton"),
    "new york": _region("United States", "North America", "New York"),
    "los angeles": _region("United States", "North America", "Los Angeles"),

    # Countries
    "india": _region("India", "Asia"),
    "china": _region("China", "Asia"),
    "bangladesh": _region("Bangladesh", "Asia"),
    "vietnam": _region("Vietnam", "Asia"),
    "pakistan": _region("Pakistan", "Asia"),
    "sri lanka": _region("Sri Lanka", "Asia"),
    "indonesia": _region("Indonesia", "Asia"),
    "turkey": _region("Turkey", "Asia"),
    "germany": _region("Germany", "Europe"),
    "italy": _region("Italy", "Europe"),
    "france": _region("France", "Europe"),
    "uk": _region("United Kingdom", "Europe"),
    "britain": _region("United Kingdom", "Europe"),
    "usa": _region("United States", "North America"),
    "brazil": _region("Brazil", "South America"),
}

SECTOR_KEYWORDS: Dict[str, List[str]] = {
    "Cotton": ["cotton", "bale", "ginning", "staple", "lint", "bt cotton"],
    "Yarn": ["yarn", "spinners", "spinning", "spindle", "count", "ne", "tex", "denier", "ply"],
    "Knitting": ["knitting", "knit", "knitwear", "interlock", "jersey", "rib", "hosiery"],
    "Weaving": ["weaving", "loom", "shuttle", "powerloom", "rapier", "airjet"],
    "Processing": ["dyeing", "printing", "finishing", "bleaching", "mercerizing", "zld", "etp", "cetu"],
    "Garments": ["garment", "apparel", "clothing", "fashion", "readymade", "rmg"],
    "Denim": ["denim", "jeans", "indigo"],
    "Technical Textiles": ["technical textile", "geotextile", "meditech", "agrotech", "protech", "smart textile"],
    "Home Textiles": ["home textile", "bedding", "towel", "curtain", "sheet", "rug", "carpet"],
    "Man-Made Fiber": ["polyester", "nylon", "viscose", "acrylic", "synthetic", "mmf", "psf"],
    "Sustainability": ["sustainable", "recycle", "circular", "eco-friendly", "organic", "gots", "grs", "esg", "carbon"],
    "Machinery": ["textile machinery", "itma", "spinning machine", "knitting machine"],
    "Trade": ["export", "import", "fta", "trade", "tariff", "duty", "shipment", "logistics"],
    "Policy": ["ministry of textile", "policy", "subsidy", "scheme", "pli", "tufs", "samarth", "mitra", "budget"],
}

# Iteration order is the tie-break order for category detection.
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Breaking": ["breaking", "just in", "urgent", "alert", "developing", "flash"],
    "Markets": ["price", "stock", "market", "index", "commodity", "trading", "shares", "earnings", "revenue"],
    "Industry": ["industry", "sector", "manufacturing", "production", "factory", "mill", "plant"],
    "Trade": ["export", "import", "trade", "shipment", "customs", "tariff", "quota", "fta", "bilateral"],
    "Technology": ["technology", "innovation", "automation", "ai", "digital", "smart", "iot", "robotics"],
    "Sustainability": ["sustainable", "eco", "green", "recycle", "circular", "carbon", "climate", "organic"],
    "Policy": ["policy", "government", "ministry", "regulation", "law", "scheme", "subsidy", "budget", "cabinet"],
    "Business & Investments": ["investment", "merger", "acquisition", "ipo", "funding", "expansion", "capex", "venture"],
    "Innovation & Tech": ["research", "r&d", "patent", "breakthrough", "discovery", "startup", "lab"],
    "Cluster Spotlight": ["tiruppur", "ludhiana", "surat", "shaoxing", "dhaka", "prato", "cluster", "hub", "zone"],
    "Market Intelligence": ["forecast", "outlook", "trend", "analysis", "report", "survey", "data", "statistics"],
    "Policy & Trade": ["fta", "wto", "bilateral", "duties", "anti-dumping", "safeguard", "sanctions"],
}

DEFAULT_CATEGORY = "Industry"
DEFAULT_PILLAR = "Market Intelligence"

CATEGORY_PILLARS: Dict[str, str] = {
    "Breaking": "Market Intelligence",
    "Markets": "Market Intelligence",
    "Industry": "Business & Investments",
    "Trade": "Policy & Trade",
    "Policy": "Policy & Trade",
    "Technology": "Innovation & Tech",
    "Sustainability": "Sustainability & Compliance",
    "Business & Investments": "Business & Investments",
    "Innovation & Tech": "Innovation & Tech",
    "Cluster Spotlight": "Cluster Spotlight",
    "Market Intelligence": "Market Intelligence",
    "Policy & Trade": "Policy & Trade",
    "Sustainability & Compliance": "Sustainability & Compliance",
}

STOPWORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "this", "that",
    "these", "those", "it", "its", "new", "how", "what", "why", "where",
    "who", "which", "from", "as", "more", "also", "said", "says", "per",
    "year", "years", "million", "billion", "percent", "according",
])

TAG_PATTERN_GROUPS: List[Tuple[str, "re.Pattern[str]"]] = [
    ("trade_agreements", re.compile(r"\b(india[- ]eu[- ]fta|rcep|efta|cepa)\b", re.IGNORECASE)),
    ("organizations", re.compile(r"\b(wto|bgmea|bkmea|texprocil|aepc|citi)\b", re.IGNORECASE)),
    ("price_indices", re.compile(r"\b(cotlook|cotton[- ]price|yarn[- ]price|icac)\b", re.IGNORECASE)),
    ("events", re.compile(r"\b(itma|texprocess|heimtextil|intertextile)\b", re.IGNORECASE)),
    ("certifications", re.compile(r"\b(oeko[- ]tex|gots|bci|bluesign|higg)\b", re.IGNORECASE)),
    ("policy_terms", re.compile(r"\b(pli[- ]scheme|meis|rodtep|rbi|anti[- ]dumping)\b", re.IGNORECASE)),
    ("topic_terms", re.compile(r"\b(tariff|export[- ]ban|import[- ]duty|subsidy|quota)\b", re.IGNORECASE)),
    ("sustainability_terms", re.compile(r"\b(carbon[- ]neutral|zero[- ]waste|organic|fair[- ]trade)\b", re.IGNORECASE)),
]

HASHTAG_PATTERN = re.compile(r"#(\w+)")

# Relevance scoring inputs
PRIORITY_COUNTRIES = ["India", "China", "Bangladesh", "Vietnam", "Pakistan", "Turkey"]
CORE_SECTORS = ["Yarn", "Cotton", "Knitting", "Garments", "Trade"]
TITLE_IMPORTANCE_TERMS = ["yarn", "cotton", "textile", "garment", "knitwear", "export", "tiruppur", "china"]

URGENT_TERMS = ["breaking", "just in", "urgent", "alert", "developing"]


def word_pattern(keyword: str) -> "re.Pattern[str]":
    """Whole-word, case-insensitive pattern for a keyword."""
    return re.compile(rf"\b{re.escape(keyword.lower())}\b", re.IGNORECASE)


REGION_PATTERNS: List[Tuple["re.Pattern[str]", RegionEntry]] = [
    (word_pattern(keyword), entry) for keyword, entry in REGION_KEYWORDS.items()
]

SECTOR_PATTERNS: Dict[str, List["re.Pattern[str]"]] = {
    sector: [word_pattern(k) for k in keywords] for sector, keywords in SECTOR_KEYWORDS.items()
}

CATEGORY_PATTERNS: Dict[str, List["re.Pattern[str]"]] = {
    category: [word_pattern(k) for k in keywords] for category, keywords in CATEGORY_KEYWORDS.items()
}


def pillar_for(category: str) -> str:
    return CATEGORY_PILLARS.get(category, DEFAULT_PILLAR)
