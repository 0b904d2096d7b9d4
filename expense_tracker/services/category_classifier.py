# services/category_classifier.py

from typing import Dict, List

from ..db.enums import Category

# Checked in Category declaration order; first match wins
CATEGORY_KEYWORDS: Dict[Category, List[str]] = {
    Category.FOOD: ["restaurant", "cafe", "food", "swiggy", "zomato", "dominos", "pizza", "mcdonald"],
    Category.TRANSPORT: ["uber", "ola", "petrol", "fuel", "metro", "taxi", "bus", "rapido"],
    Category.SHOPPING: ["amazon", "flipkart", "mall", "store", "shop", "myntra", "ajio"],
    Category.BILLS: ["electricity", "water", "gas", "internet", "mobile", "recharge", "bill"],
    Category.ENTERTAINMENT: ["movie", "netflix", "spotify", "prime", "hotstar", "cinema"],
    Category.HEALTHCARE: ["hospital", "pharmacy", "doctor", "medical", "clinic", "apollo"],
}


def classify_category(description: str) -> Category:
    """Keyword (substring) match on the lowercased description; Others if nothing matches."""
    lowered = (description or "").lower()
    for category in Category:
        keywords = CATEGORY_KEYWORDS.get(category, [])
        if any(keyword in lowered for keyword in keywords):
            return category
    return Category.OTHERS
