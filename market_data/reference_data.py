"""
Static descriptive reference tables.

Lookups never fail: unknown names get a generic default. Returned
sequences are tuples so callers cannot mutate the shared tables.
"""

from __future__ import annotations

from types import MappingProxyType

REGIONAL_DRIVERS = MappingProxyType({
    "North America": ("High disposable income", "Advanced healthcare infrastructure"),
    "Europe": ("Aging population", "Aesthetic consciousness"),
    "Asia Pacific": ("Growing middle class", "Increasing beauty awareness"),
    "Latin America": ("Beauty culture", "Medical tourism"),
    "Middle East & Africa": ("Medical tourism", "High-income demographics"),
})
DEFAULT_REGIONAL_DRIVERS = ("Market expansion", "Economic growth")

PRODUCT_DESCRIPTIONS = MappingProxyType({
    "Mesotherapy": "Injection of vitamins, minerals, and other nutrients directly into the skin",
    "Micro-needle": "Minimally invasive skin treatment using fine needles to create micro-injuries",
})
DEFAULT_PRODUCT_DESCRIPTION = "Advanced skin booster treatment"

PRODUCT_APPLICATIONS = MappingProxyType({
    "Mesotherapy": ("Facial rejuvenation", "Body contouring", "Hair restoration"),
    "Micro-needle": ("Scar reduction", "Skin texture improvement", "Anti-aging"),
})
DEFAULT_PRODUCT_APPLICATIONS = ("Skin enhancement", "Anti-aging")

INGREDIENT_BENEFITS = MappingProxyType({
    "Hyaluronic Acid (HA)": ("Deep hydration", "Volume restoration", "Skin elasticity"),
    "Polydeoxyribonucleotides (PDRN)": ("Tissue regeneration", "Anti-inflammatory", "Wound healing"),
    "Poly-L-Lactic Acid (PLLA)": ("Collagen stimulation", "Long-lasting results"),
    "Polycaprolactone (PCL)": ("Collagen synthesis", "Skin tightening"),
    "Exosomes": ("Cellular regeneration", "Advanced anti-aging"),
})
DEFAULT_INGREDIENT_BENEFITS = ("Skin enhancement", "Anti-aging benefits")

FEMALE_AGE_GROUPS = ("25-35", "36-45", "46-55", "55+")
DEFAULT_AGE_GROUPS = ("30-40", "41-50", "50+")

END_USER_CHARACTERISTICS = MappingProxyType({
    "Medspas": ("Luxury experience", "Comprehensive services", "High-end clientele"),
    "Dermatology Clinics": ("Medical expertise", "Clinical setting", "Insurance coverage"),
})
DEFAULT_END_USER_CHARACTERISTICS = ("Professional service", "Quality treatment")

# population (millions), penetration rate (%), average spending (USD)
COUNTRY_PROFILES = MappingProxyType({
    "United States": (331.9, 2.8, 890.0),
    "Canada": (38.2, 3.2, 1150.0),
    "Mexico": (128.9, 1.1, 650.0),
})
DEFAULT_COUNTRY_PROFILE = (50.0, 2.0, 750.0)

KEY_DRIVERS = (
    "Rising awareness about aesthetic treatments",
    "Increasing disposable income in emerging markets",
    "Growing aging population globally",
    "Technological advancements in minimally invasive procedures",
)

KEY_RESTRAINTS = (
    "High cost of treatments",
    "Risk of side effects and complications",
    "Lack of skilled professionals in developing regions",
)

MARKET_PLAYERS = (
    MappingProxyType({
        "name": "Allergan Aesthetics (AbbVie)",
        "market_share": 18.5,
        "headquarters": "Ireland",
        "key_products": ("Juvederm", "Voluma", "Volbella", "Skinvive"),
        "revenue_2023": 4200,
    }),
    MappingProxyType({
        "name": "Galderma",
        "market_share": 15.2,
        "headquarters": "Switzerland",
        "key_products": ("Restylane", "Emervel", "Sculptra", "Redensity"),
        "revenue_2023": 3800,
    }),
    MappingProxyType({
        "name": "Merz Pharma",
        "market_share": 12.8,
        "headquarters": "Germany",
        "key_products": ("Belotero", "Radiesse", "Ultherapy"),
        "revenue_2023": 2900,
    }),
    MappingProxyType({
        "name": "Sinclair Pharma",
        "market_share": 9.4,
        "headquarters": "UK",
        "key_products": ("Perfectha", "Sculptra", "Ellanse"),
        "revenue_2023": 1800,
    }),
    MappingProxyType({
        "name": "Others",
        "market_share": 44.1,
        "headquarters": "Various",
        "key_products": ("Various regional brands",),
        "revenue_2023": 8500,
    }),
)

MARKET_TRENDS = (
    MappingProxyType({
        "trend": "Rising Demand for Non-Invasive Procedures",
        "impact": "High",
        "description": "Consumers increasingly prefer minimally invasive treatments with minimal downtime",
        "regions": ("North America", "Europe", "Asia Pacific"),
    }),
    MappingProxyType({
        "trend": "Growing Male Market Segment",
        "impact": "Medium",
        "description": "Increasing acceptance of aesthetic treatments among male consumers",
        "regions": ("North America", "Europe"),
    }),
    MappingProxyType({
        "trend": "Technological Advancements",
        "impact": "High",
        "description": "Development of new ingredients and delivery methods enhancing treatment efficacy",
        "regions": ("Global",),
    }),
    MappingProxyType({
        "trend": "Medical Tourism",
        "impact": "Medium",
        "description": "Cross-border travel for affordable and high-quality aesthetic treatments",
        "regions": ("Asia Pacific", "Latin America", "Middle East & Africa"),
    }),
)


def regional_drivers(region: str) -> tuple[str, ...]:
    return REGIONAL_DRIVERS.get(region, DEFAULT_REGIONAL_DRIVERS)


def product_description(product_type: str) -> str:
    return PRODUCT_DESCRIPTIONS.get(product_type, DEFAULT_PRODUCT_DESCRIPTION)


def product_applications(product_type: str) -> tuple[str, ...]:
    return PRODUCT_APPLICATIONS.get(product_type, DEFAULT_PRODUCT_APPLICATIONS)


def ingredient_benefits(ingredient: str) -> tuple[str, ...]:
    return INGREDIENT_BENEFITS.get(ingredient, DEFAULT_INGREDIENT_BENEFITS)


def age_groups(gender: str) -> tuple[str, ...]:
    return FEMALE_AGE_GROUPS if gender.strip().lower() == "female" else DEFAULT_AGE_GROUPS


def end_user_characteristics(end_user: str) -> tuple[str, ...]:
    return END_USER_CHARACTERISTICS.get(end_user, DEFAULT_END_USER_CHARACTERISTICS)


def country_profile(country: str) -> tuple[float, float, float]:
    """(population in millions, penetration rate %, average spending USD)."""
    return COUNTRY_PROFILES.get(country, DEFAULT_COUNTRY_PROFILE)
