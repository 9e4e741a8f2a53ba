"""Class-label lookup tables for the vision models.

Raw labels arrive as lowercase slugs ("kare_kare", "bell-peppers"). They are
cleaned to underscore form before lookup. Labels missing from the name tables
are title-cased; labels missing from the category table fall back to
keyword matching, then to FOOD (food scans) or OTHER (ingredient scans).
"""

import re

from src.models.models import ItemCategory, ScanMode

FOOD_NAMES = {
    "adobo": "Chicken Adobo",
    "lechon": "Lechon",
    "sinigang": "Sinigang",
    "lumpia": "Lumpia",
    "pancit": "Pancit",
    "rice": "Rice",
    "kare_kare": "Kare-Kare",
    "sisig": "Sisig",
    "bicol_express": "Bicol Express",
    "dinuguan": "Dinuguan",
    "fried_rice": "Fried Rice",
    "chicken_curry": "Chicken Curry",
    "beef_stew": "Beef Stew",
    "pork_chop": "Pork Chop",
    "fish_fillet": "Fish Fillet",
    "vegetable_salad": "Vegetable Salad",
    "noodle_soup": "Noodle Soup",
    "grilled_chicken": "Grilled Chicken",
    "steamed_fish": "Steamed Fish",
}

INGREDIENT_NAMES = {
    "tomato": "Tomato",
    "tomatoes": "Tomato",
    "onion": "Onion",
    "onions": "Onion",
    "garlic": "Garlic",
    "garlic_clove": "Garlic",
    "garlic_cloves": "Garlic",
    "carrot": "Carrot",
    "carrots": "Carrot",
    "potato": "Potato",
    "potatoes": "Potato",
    "cabbage": "Cabbage",
    "lettuce": "Lettuce",
    "spinach": "Spinach",
    "broccoli": "Broccoli",
    "bell_pepper": "Bell Pepper",
    "bell_peppers": "Bell Pepper",
    "pepper": "Pepper",
    "chili": "Chili Pepper",
    "ginger": "Ginger",
    "lemon": "Lemon",
    "lime": "Lime",
    "calamansi": "Calamansi",
    "chicken": "Chicken",
    "chicken_breast": "Chicken Breast",
    "chicken_thigh": "Chicken Thigh",
    "pork": "Pork",
    "pork_belly": "Pork Belly",
    "beef": "Beef",
    "ground_beef": "Ground Beef",
    "fish": "Fish",
    "shrimp": "Shrimp",
    "prawns": "Shrimp",
    "crab": "Crab",
    "egg": "Egg",
    "eggs": "Egg",
    "rice": "Rice",
    "noodles": "Noodles",
    "pasta": "Pasta",
    "soy_sauce": "Soy Sauce",
    "vinegar": "Vinegar",
    "salt": "Salt",
    "oil": "Cooking Oil",
    "cooking_oil": "Cooking Oil",
    "flour": "Flour",
    "sugar": "Sugar",
    "banana": "Banana",
    "apple": "Apple",
    "orange": "Orange",
    "mango": "Mango",
    "pineapple": "Pineapple",
    "coconut": "Coconut",
    "milk": "Milk",
    "coconut_milk": "Coconut Milk",
    "butter": "Butter",
}

CATEGORIES = {
    **{slug: ItemCategory.DISH for slug in FOOD_NAMES if slug != "rice"},
    "rice": ItemCategory.FOOD,
    "tomato": ItemCategory.VEGETABLE,
    "onion": ItemCategory.VEGETABLE,
    "garlic": ItemCategory.VEGETABLE,
    "carrot": ItemCategory.VEGETABLE,
    "potato": ItemCategory.VEGETABLE,
    "cabbage": ItemCategory.VEGETABLE,
    "lettuce": ItemCategory.VEGETABLE,
    "spinach": ItemCategory.VEGETABLE,
    "broccoli": ItemCategory.VEGETABLE,
    "apple": ItemCategory.FRUIT,
    "banana": ItemCategory.FRUIT,
    "orange": ItemCategory.FRUIT,
    "mango": ItemCategory.FRUIT,
    "pineapple": ItemCategory.FRUIT,
    "coconut": ItemCategory.FRUIT,
    "lemon": ItemCategory.FRUIT,
    "lime": ItemCategory.FRUIT,
    "chicken": ItemCategory.MEAT,
    "pork": ItemCategory.MEAT,
    "beef": ItemCategory.MEAT,
    "fish": ItemCategory.MEAT,
    "shrimp": ItemCategory.MEAT,
    "crab": ItemCategory.MEAT,
}

CATEGORY_KEYWORDS = {
    ItemCategory.VEGETABLE: ["tomato", "onion", "garlic", "carrot", "potato", "cabbage", "lettuce", "spinach", "broccoli"],
    ItemCategory.FRUIT: ["apple", "banana", "orange", "mango", "pineapple", "coconut", "lemon", "lime", "calamansi"],
    ItemCategory.MEAT: ["chicken", "pork", "beef", "fish", "shrimp", "crab", "lamb", "prawn"],
    ItemCategory.GRAIN: ["rice", "wheat", "corn", "oats", "quinoa", "barley", "flour", "noodle", "pasta"],
    ItemCategory.DAIRY: ["milk", "cheese", "butter", "yogurt", "cream", "coconut milk"],
    ItemCategory.SPICE: ["salt", "pepper", "ginger", "turmeric", "cumin", "paprika", "chili"],
    ItemCategory.CONDIMENT: ["soy sauce", "vinegar", "fish sauce", "oyster sauce", "ketchup"],
    ItemCategory.OIL: ["olive oil", "vegetable oil", "coconut oil", "sesame oil", "cooking oil"],
}

# Longest keyword wins ("coconut milk" is dairy, not fruit)
_KEYWORDS_BY_LENGTH = sorted(
    ((keyword, category) for category, keywords in CATEGORY_KEYWORDS.items() for keyword in keywords),
    key=lambda pair: len(pair[0]),
    reverse=True,
)

_SEPARATORS = re.compile(r"[\s_-]+")


def clean_label(label: str) -> str:
    """'Bell-Pepper ' -> 'bell_pepper'."""
    return _SEPARATORS.sub("_", (label or "").strip().lower()).strip("_")


def capitalize_words(label: str) -> str:
    """'green_mango' -> 'Green Mango'."""
    return " ".join(word.capitalize() for word in clean_label(label).split("_") if word)


def canonical_name(label: str, mode: ScanMode) -> str:
    slug = clean_label(label)
    table = INGREDIENT_NAMES if mode == ScanMode.INGREDIENT else FOOD_NAMES
    return table.get(slug) or capitalize_words(label)


def categorize(label: str, mode: ScanMode) -> ItemCategory:
    slug = clean_label(label)
    category = CATEGORIES.get(slug)
    if category is not None:
        return category

    words = slug.replace("_", " ")
    for keyword, keyword_category in _KEYWORDS_BY_LENGTH:
        if keyword in words:
            return keyword_category

    return ItemCategory.OTHER if mode == ScanMode.INGREDIENT else ItemCategory.FOOD
