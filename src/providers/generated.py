"""Generated recipe template (terminal tier, no network, never fails).

Filipino dishes the food model recognizes (adobo, sinigang, kare-kare,
lechon, lumpia, pancit) come from a small curated collection with full
amounts and dish-specific steps, labeled with CURATED_NOTE.

Anything else gets a clearly labeled recipe skeleton built from the food name
alone: base ingredients come from a small table of known dishes (or a generic
aromatics list around the main protein), steps come from a dish-type pattern
picked by keyword. Skeletons carry TEMPLATE_NOTE.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from src.matching.text import display_name, normalize_name
from src.models.models import RecipeDTO, RecipeIngredient
from src.providers.base import RecipeProvider
from src.utils.logger import logger

TEMPLATE_NOTE = (
    "This is a basic recipe template. Cooking times and ingredients may vary based on your preferences."
)

CURATED_NOTE = "Traditional Filipino recipe from the built-in collection. Adjust seasoning to taste."

_CHICKEN_ADOBO = {
    "title": "Chicken Adobo",
    "ingredients": [
        ("Chicken pieces (thighs and drumsticks)", "1 kg"),
        ("Soy sauce", "1/2 cup"),
        ("White vinegar", "1/4 cup"),
        ("Garlic", "6-8 cloves, minced"),
        ("Bay leaves", "3 pieces"),
        ("Whole black peppercorns", "1 tsp"),
        ("Onion", "1 medium, sliced"),
        ("Cooking oil", "2 tbsp"),
        ("Brown sugar (optional)", "1 tbsp"),
        ("Salt", "to taste"),
    ],
    "steps": [
        "Marinate chicken in soy sauce and vinegar for at least 30 minutes.",
        "Heat oil in a heavy-bottomed pot over medium heat.",
        "Sauté garlic and onion until fragrant and golden.",
        "Add marinated chicken and cook until browned on all sides.",
        "Pour in the marinade, add bay leaves and peppercorns.",
        "Bring to a boil, then reduce heat and simmer covered for 25-30 minutes.",
        "Remove lid and simmer for another 10 minutes to reduce sauce.",
        "Add brown sugar if desired for a slightly sweet taste.",
        "Season with salt and serve hot with steamed rice.",
    ],
    "prep_minutes": 45,
    "cook_minutes": 45,
    "servings": 4,
}

# Looked up by the food name with punctuation dropped ("Kare-Kare" -> "kare kare")
CURATED_RECIPES = {
    "chicken adobo": _CHICKEN_ADOBO,
    "adobo": _CHICKEN_ADOBO,
    "sinigang": {
        "title": "Sinigang na Baboy",
        "ingredients": [
            ("Pork ribs or pork belly", "1 kg, cut into pieces"),
            ("Tamarind paste or sinigang mix", "2-3 tbsp or 1 packet"),
            ("Tomatoes", "2 medium, quartered"),
            ("Onion", "1 large, quartered"),
            ("Kangkong (water spinach) leaves", "2 cups"),
            ("Radish (labanos)", "1 medium, sliced"),
            ("Green chili (siling haba)", "2-3 pieces"),
            ("Eggplant", "1 medium, sliced"),
            ("Fish sauce (patis)", "2 tbsp"),
            ("Water", "8-10 cups"),
            ("Salt", "to taste"),
        ],
        "steps": [
            "In a large pot, boil pork in water for 1 hour or until tender.",
            "Add tomatoes and onions, cook for 5 minutes until soft.",
            "Add tamarind paste or sinigang mix, stir well to dissolve.",
            "Add radish and eggplant, cook for 5 minutes.",
            "Add green chili and cook for 2 minutes.",
            "Season with fish sauce and salt to taste.",
            "Add kangkong leaves last and cook for 1-2 minutes.",
            "Serve hot with steamed rice.",
        ],
        "prep_minutes": 15,
        "cook_minutes": 75,
        "servings": 6,
    },
    "kare kare": {
        "title": "Kare-Kare",
        "ingredients": [
            ("Oxtail", "1.5 kg, cut into pieces"),
            ("Peanut butter (smooth)", "1 cup"),
            ("Rice flour or ground rice", "1/4 cup"),
            ("Eggplants", "2 medium, sliced"),
            ("String beans (sitaw)", "1 bundle, cut into 2-inch pieces"),
            ("Banana heart (puso ng saging)", "1 piece, sliced"),
            ("Shrimp paste (bagoong alamang)", "3-4 tbsp"),
            ("Annatto seeds or annatto powder", "2 tbsp"),
            ("Onion", "1 medium, chopped"),
            ("Garlic", "4 cloves, minced"),
            ("Cooking oil", "2 tbsp"),
            ("Salt and pepper", "to taste"),
        ],
        "steps": [
            "Boil oxtail in water for 2-3 hours until very tender.",
            "Reserve the broth and set aside the meat.",
            "Soak annatto seeds in 1/4 cup warm water, strain to get the color.",
            "Heat oil in a large pot, sauté garlic and onion.",
            "Add peanut butter and rice flour, mix well.",
            "Gradually add the reserved broth while stirring continuously.",
            "Add annatto water for color and bring to a boil.",
            "Add the cooked oxtail and simmer for 10 minutes.",
            "Add vegetables starting with the hardest (eggplant, then string beans).",
            "Season with salt and pepper.",
            "Serve hot with steamed rice and shrimp paste on the side.",
        ],
        "prep_minutes": 30,
        "cook_minutes": 180,
        "servings": 6,
    },
    "lechon": {
        "title": "Lechon Kawali",
        "ingredients": [
            ("Pork belly, skin on", "1 kg"),
            ("Salt", "2 tbsp"),
            ("Black pepper", "1 tsp"),
            ("Bay leaves", "4 pieces"),
            ("Peppercorns", "1 tsp"),
            ("Garlic", "4 cloves"),
            ("Water", "enough for boiling"),
            ("Oil", "enough for deep frying"),
        ],
        "steps": [
            "Rub pork belly with salt and pepper, let it sit for 30 minutes.",
            "In a large pot, boil water with bay leaves, peppercorns and garlic.",
            "Add pork belly and boil for 45 minutes until tender.",
            "Remove pork and let it cool and dry completely (preferably overnight).",
            "Heat oil in a deep pan for frying.",
            "Deep fry the pork belly until skin is golden and crispy.",
            "Drain on paper towels and let it rest for 5 minutes.",
            "Chop into serving pieces and serve with lechon sauce or liver sauce.",
        ],
        "prep_minutes": 60,
        "cook_minutes": 60,
        "servings": 4,
    },
    "lumpia": {
        "title": "Fresh Lumpia (Lumpiang Sariwa)",
        "ingredients": [
            ("Lumpia wrappers", "20 pieces"),
            ("Cooked shrimp", "2 cups, chopped"),
            ("Lettuce leaves", "2 cups, chopped"),
            ("Carrots", "1 cup, julienned"),
            ("Bean sprouts", "1 cup"),
            ("Jicama (singkamas)", "1 cup, julienned"),
            ("Hard-boiled eggs", "2 pieces, sliced"),
            ("Peanuts", "1/4 cup, crushed"),
            ("Garlic", "2 cloves, minced"),
            ("Cooking oil", "2 tbsp"),
        ],
        "steps": [
            "Heat oil in a pan and sauté garlic until fragrant.",
            "Add shrimp and cook for 2 minutes.",
            "Add vegetables (except lettuce) and stir-fry for 3-4 minutes.",
            "Season with salt and pepper, let cool.",
            "Place lettuce on lumpia wrapper, add filling mixture.",
            "Add egg slices and crushed peanuts.",
            "Roll tightly and serve with sweet and sour sauce.",
            "Garnish with additional crushed peanuts if desired.",
        ],
        "prep_minutes": 30,
        "cook_minutes": 15,
        "servings": 4,
    },
    "pancit": {
        "title": "Pancit Canton",
        "ingredients": [
            ("Pancit canton noodles", "500g"),
            ("Pork", "200g, sliced thin"),
            ("Chicken breast", "200g, sliced"),
            ("Shrimp", "100g, peeled"),
            ("Cabbage", "2 cups, chopped"),
            ("Carrots", "1 cup, julienned"),
            ("Snow peas", "1 cup"),
            ("Garlic", "4 cloves, minced"),
            ("Onion", "1 medium, sliced"),
            ("Soy sauce", "3 tbsp"),
            ("Oyster sauce", "2 tbsp"),
            ("Chicken broth", "3 cups"),
            ("Cooking oil", "2 tbsp"),
        ],
        "steps": [
            "Soak pancit canton noodles in warm water until soft.",
            "Heat oil in a large wok or pan.",
            "Sauté garlic and onion until fragrant.",
            "Add pork and chicken, cook until no longer pink.",
            "Add shrimp and cook for 2 minutes.",
            "Add hard vegetables (carrots) first, then softer ones.",
            "Add drained noodles and mix gently.",
            "Pour soy sauce, oyster sauce and broth gradually.",
            "Toss everything together and cook for 5-7 minutes.",
            "Serve hot with lemon wedges and fish sauce.",
        ],
        "prep_minutes": 20,
        "cook_minutes": 20,
        "servings": 6,
    },
}

KNOWN_DISHES = {
    "fried rice": [
        ("Cooked rice (preferably day-old)", "4 cups"),
        ("Eggs", "2-3 pieces"),
        ("Garlic", "3 cloves, minced"),
        ("Onion", "1 medium, diced"),
        ("Soy sauce", "3 tbsp"),
        ("Cooking oil", "3 tbsp"),
        ("Green onions", "2 stalks, chopped"),
        ("Salt and pepper", "to taste"),
    ],
    "pasta": [
        ("Pasta", "500g"),
        ("Garlic", "4 cloves, minced"),
        ("Olive oil", "3 tbsp"),
        ("Onion", "1 medium, diced"),
        ("Salt and pepper", "to taste"),
        ("Parmesan cheese", "1/2 cup, grated"),
    ],
    "steak": [
        ("Beef steak", "4 pieces"),
        ("Salt", "1 tsp"),
        ("Black pepper", "1/2 tsp"),
        ("Garlic", "2 cloves, minced"),
        ("Butter", "2 tbsp"),
        ("Cooking oil", "2 tbsp"),
    ],
    "adobo": [
        ("Chicken", "1 kg, cut into pieces"),
        ("Soy sauce", "1/2 cup"),
        ("Vinegar", "1/3 cup"),
        ("Garlic", "1 head, crushed"),
        ("Bay leaves", "3 pieces"),
        ("Black peppercorns", "1 tsp"),
        ("Water", "1 cup"),
        ("Cooking oil", "2 tbsp"),
    ],
    "sinigang": [
        ("Pork", "1 kg, cut into pieces"),
        ("Tamarind soup base", "1 pack"),
        ("Tomato", "2 pieces, quartered"),
        ("Onion", "1 medium, quartered"),
        ("Radish", "1 piece, sliced"),
        ("String beans", "1 bunch, cut"),
        ("Water spinach", "1 bunch"),
        ("Fish sauce", "to taste"),
        ("Water", "2 liters"),
    ],
}

GENERIC_AROMATICS = [
    ("Garlic", "3 cloves, minced"),
    ("Onion", "1 medium, chopped"),
    ("Cooking oil", "2 tbsp"),
    ("Water or broth", "1 cup"),
    ("Salt and pepper", "to taste"),
]

STEP_PATTERNS: List[Tuple[Tuple[str, ...], List[str]]] = [
    (
        ("pasta", "spaghetti", "noodle", "pancit"),
        [
            "Bring a large pot of salted water to boil.",
            "Add pasta and cook according to package directions until al dente.",
            "Heat oil in a large pan over medium heat.",
            "Sauté garlic and onions until fragrant and golden.",
            "Add other ingredients and cook until tender.",
            "Drain pasta and add to the pan with sauce.",
            "Toss everything together and cook for 2-3 minutes.",
            "Season with salt and pepper to taste.",
            "Serve hot with grated cheese if desired.",
        ],
    ),
    (
        ("soup", "broth", "stew", "sinigang", "tinola", "nilaga"),
        [
            "Heat oil in a large pot over medium heat.",
            "Sauté onions and garlic until fragrant.",
            "Add meat (if using) and brown on all sides.",
            "Add vegetables starting with the hardest ones first.",
            "Pour in broth or water to cover ingredients.",
            "Bring to a boil, then reduce heat and simmer.",
            "Cook for 30-45 minutes until all ingredients are tender.",
            "Season with salt, pepper, and herbs to taste.",
            "Serve hot with bread or rice.",
        ],
    ),
    (
        ("rice", "fried"),
        [
            "Heat oil in a large wok or pan over high heat.",
            "Beat eggs and scramble them, then set aside.",
            "Add garlic and onions to the pan, stir-fry until fragrant.",
            "Add rice and stir-fry, breaking up any clumps.",
            "Add soy sauce and other seasonings, mix well.",
            "Add vegetables and protein, stir-fry for 3-4 minutes.",
            "Return scrambled eggs to the pan and mix gently.",
            "Garnish with green onions and serve hot.",
        ],
    ),
    (
        ("chicken", "meat", "pork", "beef", "adobo", "steak"),
        [
            "Season the meat with salt and pepper.",
            "Heat oil in a large pan over medium-high heat.",
            "Sear the meat until browned on all sides.",
            "Add onions and garlic, cook until fragrant.",
            "Add other vegetables and seasonings.",
            "Add liquid (broth, vinegar, or water) as needed.",
            "Cover and simmer until meat is tender.",
            "Adjust seasoning and serve hot with rice or vegetables.",
        ],
    ),
]

DEFAULT_STEPS = [
    "Prepare all ingredients by washing, chopping, and measuring as needed.",
    "Heat oil in a large pan or pot over medium heat.",
    "Sauté aromatics (garlic, onions, ginger) until fragrant.",
    "Add main ingredients and cook according to their cooking times.",
    "Season with salt, pepper, and other spices to taste.",
    "Add liquid if needed and bring to appropriate temperature.",
    "Cook until all ingredients are tender and flavors are well combined.",
    "Taste and adjust seasoning as needed.",
    "Serve hot with appropriate accompaniments.",
]


_NON_LETTERS = re.compile(r"[^a-z]+")


def curated_recipe(food_name: str) -> Optional[Dict[str, Any]]:
    key = " ".join(_NON_LETTERS.sub(" ", normalize_name(food_name)).split())
    return CURATED_RECIPES.get(key)


def _main_protein(name: str) -> str:
    for protein in ("chicken", "pork", "beef", "fish", "shrimp"):
        if protein in name:
            return protein.capitalize()
    return "Main ingredient"


def template_ingredients(food_name: str) -> List[RecipeIngredient]:
    name = normalize_name(food_name)
    for dish, lines in KNOWN_DISHES.items():
        if dish in name:
            return [RecipeIngredient(name=n, amount=a) for n, a in lines]
    main = RecipeIngredient(name=_main_protein(name), amount="1 kg, cut into pieces")
    return [main] + [RecipeIngredient(name=n, amount=a) for n, a in GENERIC_AROMATICS]


def template_steps(food_name: str) -> List[str]:
    name = normalize_name(food_name)
    for keywords, steps in STEP_PATTERNS:
        if any(keyword in name for keyword in keywords):
            return list(steps)
    return list(DEFAULT_STEPS)


class GeneratedRecipeProvider(RecipeProvider):
    """Deterministic template tier. Same name in, same recipe out."""

    name = "generated"
    always_succeeds = True

    async def search(self, query: str) -> Optional[RecipeDTO]:
        return self.generate(query)

    async def get_recipe(self, food_name: str) -> RecipeDTO:
        return self.generate(food_name)

    def generate(self, food_name: str) -> RecipeDTO:
        curated = curated_recipe(food_name)
        if curated:
            logger.info(f"Using curated recipe for '{curated['title']}'", extra={"provider": self.name})
            return RecipeDTO(
                title=curated["title"],
                description=f"Traditional Filipino {curated['title']}.",
                ingredients=[RecipeIngredient(name=n, amount=a) for n, a in curated["ingredients"]],
                steps=list(curated["steps"]),
                prep_minutes=curated["prep_minutes"],
                cook_minutes=curated["cook_minutes"],
                servings=curated["servings"],
                source_provider=self.name,
                note=CURATED_NOTE,
            )

        title = display_name(food_name) or "Home-Style Dish"
        logger.info(f"Using generated recipe template for '{title}'", extra={"provider": self.name})
        return RecipeDTO(
            title=f"Basic {title} Recipe"[:200],
            description=f"A simple home-style take on {title}.",
            ingredients=template_ingredients(food_name),
            steps=template_steps(food_name),
            prep_minutes=15,
            cook_minutes=30,
            servings=4,
            source_provider=self.name,
            note=TEMPLATE_NOTE,
        )
