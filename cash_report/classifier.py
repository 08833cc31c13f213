"""Keyword-based business type detection.

Plain substring containment over lowercased text. A keyword like "collision" will
misfire now and then; callers treat the result as a hint for pricing copy,
never as ground truth.
"""

from .models import UNCLASSIFIED

# Checked before the general table: an apartment community that advertises its
# on-site "fitness" center is still Property Management.
PRIORITY_TYPES = [
    ("Property Management", ["property management", "corporate housing", "multifamily", "apartment management", "tenant portal"]),
]

BUSINESS_TYPE_KEYWORDS = [
    ("Dentist", ["dentist", "dental", "orthodont", "teeth whitening"]),
    ("Law Firm", ["law firm", "attorney", "lawyer", "legal services"]),
    ("Med Spa", ["med spa", "medspa", "botox", "dermal filler"]),
    ("Chiropractor", ["chiropract", "spinal adjustment"]),
    ("Veterinarian", ["veterinar", "animal hospital", "pet clinic"]),
    ("HVAC", ["hvac", "air conditioning", "heating and cooling", "furnace"]),
    ("Plumber", ["plumber", "plumbing", "drain cleaning", "water heater"]),
    ("Roofing", ["roofing", "roofer", "roof repair", "roof replacement"]),
    ("Auto Repair", ["auto repair", "mechanic", "oil change", "brake repair", "collision"]),
    ("Real Estate", ["realtor", "real estate", "homes for sale"]),
    ("Insurance Agency", ["insurance agency", "insurance agent", "auto insurance", "home insurance"]),
    ("Restaurant", ["restaurant", "our menu", "reservations", "cuisine", "dine in"]),
    ("Salon", ["salon", "barber", "haircut", "nail studio"]),
    ("Fitness", ["gym", "fitness", "personal trainer", "yoga studio"]),
]


def detect_business_type(text: str) -> str:
    """Return the first business type whose keywords appear in `text`, else "unclassified"."""
    haystack = text.lower()
    for business_type, keywords in PRIORITY_TYPES + BUSINESS_TYPE_KEYWORDS:
        if any(kw in haystack for kw in keywords):
            return business_type
    return UNCLASSIFIED
