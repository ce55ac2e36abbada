"""
Keyword-based expense categorisation.

CATEGORIES is scanned in order and the first category owning a keyword that
occurs in the lower-cased description wins. Precedence is purely positional:
"gas bill" is transportation, not utilities, because transportation comes
first. Keep that in mind when reordering the table or adding keywords.
"""
from collections import OrderedDict
from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from splitledger.utils.currency_utils import round_to_cent


class CategoryId(str, Enum):
    transportation = "transportation"
    food = "food"
    shopping = "shopping"
    utilities = "utilities"
    travel = "travel"
    entertainment = "entertainment"
    healthcare = "healthcare"
    gifts = "gifts"
    education = "education"
    business = "business"
    other = "other"


class ExpenseCategory(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: CategoryId
    name: str
    keywords: tuple[str, ...] = ()
    subcategories: tuple[str, ...] = ()


class CategorySpending(BaseModel):
    category: ExpenseCategory
    total: Decimal
    count: int


CATEGORIES: tuple[ExpenseCategory, ...] = (
    ExpenseCategory(
        id=CategoryId.transportation,
        name="Transportation",
        keywords=(
            "uber", "lyft", "taxi", "cab", "bus", "train", "metro", "subway",
            "car", "gas", "fuel", "parking", "toll", "bike", "scooter",
            "transport", "commute", "ride",
        ),
        subcategories=("Rideshare", "Public Transit", "Gas", "Parking"),
    ),
    ExpenseCategory(
        id=CategoryId.food,
        name="Food & Dining",
        keywords=(
            "restaurant", "food", "lunch", "dinner", "breakfast", "coffee",
            "cafe", "bar", "pub", "pizza", "burger", "sushi", "groceries",
            "grocery", "supermarket", "market", "snack", "drink", "beverage",
            "meal", "dining", "takeout", "delivery", "doordash", "ubereats",
            "grubhub",
        ),
        subcategories=("Restaurants", "Groceries", "Coffee", "Delivery", "Alcohol"),
    ),
    ExpenseCategory(
        id=CategoryId.shopping,
        name="Shopping",
        keywords=(
            "shopping", "clothes", "clothing", "shoes", "electronics", "amazon",
            "store", "mall", "purchase", "buy", "retail", "online", "ebay",
            "target", "walmart", "costco", "books", "furniture", "home", "decor",
        ),
        subcategories=("Clothing", "Electronics", "Home & Garden", "Books", "Online"),
    ),
    ExpenseCategory(
        id=CategoryId.utilities,
        name="Utilities",
        keywords=(
            "electricity", "electric", "power", "water", "gas", "internet",
            "wifi", "phone", "mobile", "cable", "utility", "bill", "rent",
            "mortgage", "insurance", "heating", "cooling",
        ),
        subcategories=("Electricity", "Water", "Internet", "Phone", "Rent"),
    ),
    ExpenseCategory(
        id=CategoryId.travel,
        name="Travel",
        keywords=(
            "hotel", "accommodation", "airbnb", "vacation", "trip", "travel",
            "flight", "airline", "booking", "resort", "hostel", "motel",
            "lodge", "cruise", "tour", "sightseeing", "visa", "passport",
        ),
        subcategories=("Hotels", "Flights", "Activities", "Visa/Documents"),
    ),
    ExpenseCategory(
        id=CategoryId.entertainment,
        name="Entertainment",
        keywords=(
            "movie", "cinema", "theater", "concert", "show", "game", "gaming",
            "party", "club", "entertainment", "fun", "activity", "sport", "gym",
            "fitness", "netflix", "spotify", "subscription", "streaming",
        ),
        subcategories=("Movies", "Concerts", "Gaming", "Sports", "Subscriptions"),
    ),
    ExpenseCategory(
        id=CategoryId.healthcare,
        name="Healthcare",
        keywords=(
            "doctor", "hospital", "medical", "medicine", "pharmacy", "health",
            "dental", "dentist", "clinic", "checkup", "prescription",
            "treatment", "therapy", "surgery", "emergency",
        ),
        subcategories=("Doctor Visits", "Medications", "Dental", "Emergency"),
    ),
    ExpenseCategory(
        id=CategoryId.gifts,
        name="Gifts",
        keywords=(
            "gift", "present", "birthday", "anniversary", "wedding",
            "christmas", "holiday", "donation", "charity", "tip", "gratuity",
            "surprise",
        ),
        subcategories=("Birthday", "Holiday", "Wedding", "Donations"),
    ),
    ExpenseCategory(
        id=CategoryId.education,
        name="Education",
        keywords=(
            "school", "education", "tuition", "course", "class", "book",
            "textbook", "supplies", "university", "college", "training",
            "workshop", "seminar", "certification",
        ),
        subcategories=("Tuition", "Books", "Supplies", "Online Courses"),
    ),
    ExpenseCategory(
        id=CategoryId.business,
        name="Business",
        keywords=(
            "business", "work", "office", "meeting", "conference", "supplies",
            "equipment", "software", "service", "professional", "consulting",
            "freelance",
        ),
        subcategories=("Office Supplies", "Software", "Consulting", "Equipment"),
    ),
)

OTHER = ExpenseCategory(id=CategoryId.other, name="Other")


def categorize(description: str, categories: Iterable[ExpenseCategory] = CATEGORIES) -> ExpenseCategory:
    normalized = (description or "").lower().strip()
    for category in categories:
        for keyword in category.keywords:
            if keyword.lower() in normalized:
                return category
    return OTHER


def get_category_by_id(category_id: str) -> ExpenseCategory | None:
    if category_id == CategoryId.other:
        return OTHER
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def all_categories() -> tuple[ExpenseCategory, ...]:
    return CATEGORIES


def get_suggestions(partial_description: str, limit: int = 3) -> list[ExpenseCategory]:
    """Categories with a keyword containing the typed text, for autocomplete."""
    normalized = (partial_description or "").lower().strip()
    if len(normalized) < 2:
        return []
    matches = [c for c in CATEGORIES if any(normalized in k.lower() for k in c.keywords)]
    return matches[:limit]


def analyze_spending(expenses: Iterable[tuple[str, Decimal]]) -> list[CategorySpending]:
    """Group (description, amount) pairs by category, biggest total first."""
    totals: OrderedDict = OrderedDict()
    for description, amount in expenses:
        category = categorize(description)
        total, count = totals.get(category.id, (Decimal("0"), 0))
        totals[category.id] = (total + round_to_cent(amount), count + 1)

    result = [
        CategorySpending(category=get_category_by_id(cid), total=round_to_cent(total), count=count)
        for cid, (total, count) in totals.items()
    ]
    result.sort(key=lambda s: s.total, reverse=True)
    return result
