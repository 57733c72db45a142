"""Hand-curated synonym and morphology tables (Croatian/English).

Control flow lives in `variations` and `taxonomy`; extend these tables instead
of adding branches there.
"""

from __future__ import annotations

from .types import TaxonomyCategory

# canonical search term -> spelling/inflection variants, used for free-text expansion
SEARCH_SYNONYMS: dict[str, list[str]] = {
    "vegan": ["vegan", "veganski", "veganska", "vegan options", "vegan food"],
    "vegetarian": ["vegetarian", "vegetarijanski", "vegetarijanska", "vegetarian options"],
    "gluten-free": ["gluten-free", "gluten free", "bez glutena", "bezglutensko"],
    "halal": ["halal", "halal opcije"],
    "breakfast": ["breakfast", "doručak", "dorucak"],
    "lunch": ["lunch", "ručak", "rucak"],
    "dinner": ["dinner", "večera", "vecera"],
    "brunch": ["brunch"],
    "pizza": ["pizza", "pizze", "pizzu", "pica", "pice", "picu"],
    "burger": ["burger", "hamburger", "burgeri", "hamburgeri"],
    "cevapi": ["ćevapi", "cevapi", "cevap", "ćevape", "cevape"],
    "lazanja": ["lazanja", "lazanje", "lazanj", "lasagna", "lasagne"],
    "pasta": ["pasta", "paste", "tjestenina", "tjestenine"],
    "salad": ["salad", "salata", "salate", "salatu"],
    "soup": ["soup", "juha", "juhe", "juhu", "supa", "supu"],
    "steak": ["steak", "biftek", "odrezak", "meso", "mesa"],
    "chicken": ["chicken", "piletina", "pileca", "pileća"],
    "fish": ["fish", "riba", "ribe", "ribu"],
    "seafood": ["seafood", "morski plodovi", "plodovi mora"],
    "dessert": ["dessert", "desert", "deserti", "slastice", "slastica"],
    "pancakes": ["pancakes", "pancake", "palačinke", "palacinke", "palačinka"],
    "coffee": ["coffee", "kava", "kave", "kavu"],
    "beer": ["beer", "pivo", "piva", "pive"],
    "wine": ["wine", "vino", "vina"],
    "rice": ["rice", "riža", "riza", "riže", "rižu"],
}

# Per taxonomy category: canonical catalog name -> phrases users type for it.
# A canonical key only contributes when it matches an entry's EN or HR name.
TAXONOMY_SYNONYMS: dict[TaxonomyCategory, dict[str, list[str]]] = {
    TaxonomyCategory.DIETARY_TYPES: {
        "vegetarian": ["vege", "vegetarijansko", "vegetarijanski", "vegetarian", "veg"],
        "vegan": ["veganski", "vegan", "plant based", "biljno", "plant-based"],
        "gluten-free": ["bez glutena", "gluten free", "gf", "glutenfree"],
        "halal": ["halal", "halal options", "halal opcije"],
    },
    TaxonomyCategory.MEAL_TYPES: {
        "breakfast": ["dorucak", "doručak", "breakfast"],
        "brunch": ["brunch"],
        "lunch": ["rucak", "ručak", "lunch"],
        "dinner": ["vecera", "večera", "dinner"],
        "late night": ["kasna vecera", "kasna večera", "late night"],
        "drinks": ["pice", "piće", "drinks", "bar snacks"],
    },
    TaxonomyCategory.ESTABLISHMENT_PERKS: {
        "outdoor seating": ["terasa", "vanjska terasa", "outdoor", "garden"],
        "free wi-fi": ["wifi", "wi fi", "besplatan wifi", "free wi-fi"],
        "rooftop view": ["krovna terasa", "rooftop"],
        "sports bar": ["sportski bar", "utakmice", "prijenos utakmica"],
        "live music": ["glazba uzivo", "glazba uživo", "live music"],
        "pet-friendly": ["pet friendly", "psi dozvoljeni", "kućni ljubimci"],
        "paid parking": ["placeni parking", "plaćeni parking"],
        "free parking": ["besplatni parking", "free parking"],
        "coffee to go available": ["kava za van", "coffee to go"],
        "quick bites": ["brzi zalogaji", "fast casual"],
        "all-you-can-eat buffet": ["all you can eat", "ayce", "buffet"],
        "air-conditioned space": ["klima", "klimatizirano"],
    },
    TaxonomyCategory.ESTABLISHMENT_TYPES: {
        "restaurant": ["restoran", "restaurant"],
        "cafe": ["kafic", "kafić", "cafe", "coffee shop"],
        "bar": ["bar", "cocktail bar", "koktel bar"],
        "pub": ["pub"],
        "bistro": ["bistro"],
        "buffet": ["bife", "buffet"],
        "food truck": ["food truck", "truck"],
        "hotel restaurant": ["hotel restoran", "restoran u hotelu"],
        "cake shop": ["slasticarnica", "slastičarnica", "cake shop", "patisserie"],
        "brunch place": ["brunch place", "brunch"],
        "juice & smoothie bar": ["juice bar", "smoothie bar", "juice & smoothie bar"],
    },
    TaxonomyCategory.FOOD_TYPES: {
        "pizza": ["pizza", "pizze", "pice", "pica"],
        "burgers": ["burger", "burgeri", "burgers", "hamburger", "chickenburger"],
        "bbq & grill": ["rostilj", "roštilj", "grill", "bbq"],
        "sushi": ["susi", "sushi"],
        "pasta": ["tjestenina", "pasta"],
        "noodles / ramen": ["ramen", "rezanci", "noodles"],
        "kebab": ["kebab", "doner"],
        "pancakes": ["palacinke", "palačinke", "crepes", "crepe", "pancakes"],
        "rice dishes": ["rizoto", "rižoto", "jela od rize", "jela od riže", "rice", "riža"],
        "soups": ["juha", "juhe", "soup", "soups"],
        "ice cream": ["sladoled", "gelato", "ice cream"],
        "bakery products & pastries": ["pekara", "pekarski", "peciva", "pastries", "bakery"],
        "desserts & sweets": ["desert", "slastice", "kolaci", "kolači", "desserts", "sweets"],
        "home-style cuisine": [
            "domaca",
            "domaća",
            "kod kuce",
            "kao kod kuće",
            "home-style",
            "homemade",
        ],
        "wok": ["wok"],
        "burek": ["burek"],
        "ćevapi": ["cevapi", "ćevapi", "cevap", "ćevap"],
        "chicken": ["piletina", "chicken"],
        "healthy": ["zdravo", "healthy", "fit"],
        "croatian cuisine": ["hrvatska kuhinja", "domaca kuhinja", "croatian"],
        "italian cuisine": ["talijanska kuhinja", "italijanska", "italian"],
        "mexican cuisine": ["meksička kuhinja", "mexican", "tacos"],
        "indian food": ["indijska kuhinja", "indian", "curry"],
        "japanese cuisine": ["japanska kuhinja", "japanese"],
        "chinese cuisine": ["kineska kuhinja", "chinese"],
        "thai cuisine": ["tajlandska kuhinja", "thai"],
        "mediterranean cuisine": ["mediteranska kuhinja", "mediterranean"],
        "french cuisine": ["francuska kuhinja", "french"],
        "turkish cuisine": ["turska kuhinja", "turkish"],
        "greek cuisine": ["grcka kuhinja", "grčka kuhinja", "greek"],
        "lebanese cuisine": ["libanonska kuhinja", "lebanese"],
        "korean cuisine": ["korejska kuhinja", "korean"],
        "street food": ["street food", "ulicna hrana", "ulična hrana"],
        "bosnian cuisine": ["bosanska kuhinja", "bosnian"],
    },
    TaxonomyCategory.ALLERGENS: {
        "gluten": ["gluten"],
        "fish": ["riba", "fish"],
        "shellfish": ["skoljke", "školjke", "shellfish"],
        "eggs": ["jaja", "eggs"],
        "dairy products (lactose)": [
            "mlijecno",
            "mliječni proizvodi",
            "laktoza",
            "lactose",
            "dairy",
        ],
        "nuts": ["orasasti", "orašasti", "nuts"],
        "peanuts": ["kikiriki", "peanuts"],
        "soy": ["soja", "soy", "soya"],
        "sesame": ["sezam", "sesame"],
        "celery": ["celer", "celery"],
        "mustard": ["gorusica", "gorušica", "mustard"],
        "lupin": ["lupina", "lupin"],
        "sulfites": ["sulfiti", "sulfites", "sulphites"],
    },
    TaxonomyCategory.PRICE_CATEGORIES: {
        "budget friendly": ["pristupacno", "pristupačno", "budget", "cheap", "jeftino"],
        "mid-range": ["srednja cijena", "mid range", "mid-range", "osrednje"],
        "fine dining": ["fine dining", "skupo", "premium", "luksuzno", "high class"],
    },
}

# Croatian inflection: word suffix -> replacements for that suffix. Every
# matching rule applies, so "juhe" yields "juh", "juha" and "juhi".
HR_SUFFIX_RULES: dict[str, tuple[str, ...]] = {
    "e": ("", "a", "i"),
    "i": ("", "a"),
    "a": ("",),
    "he": ("ha",),
    "pe": ("pa",),
    "ci": ("",),
}

# English singularization: first matching suffix wins; (suffix, replacement, min word length)
EN_SINGULAR_RULES: tuple[tuple[str, str, int], ...] = (
    ("ies", "y", 4),
    ("es", "", 3),
    ("s", "", 2),
)

# English pluralization (only for words no singular rule applied to)
EN_SIBILANT_ENDINGS: tuple[str, ...] = ("ch", "sh", "x", "z", "s", "o")

# Stems of high-value menu keywords; variants containing one rank higher
KEYWORD_STEMS: tuple[str, ...] = (
    "pizza",
    "pizz",
    "burger",
    "juha",
    "soup",
    "salad",
    "salata",
    "pasta",
    "tjesten",
    "cevap",
    "cevapi",
    "ćevap",
)
