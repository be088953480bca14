from typing import Final

DATE_FORMAT: Final[str] = "%Y-%m-%d"

MEALS: Final[tuple] = ("lunch", "dinner")
COURSES: Final[tuple] = ("soup", "main1", "side1a", "side1b", "main2", "side2a", "side2b", "dessert")
# 0=Sunday .. 6=Saturday, listed in kitchen order (Monday first)
DAYS_OF_WEEK: Final[tuple] = (1, 2, 3, 4, 5, 6, 0)

# Alternate meal vocabulary used by older rotation imports
MEAL_ALIASES: Final[dict[str, str]] = {"mittag": "lunch", "abend": "dinner"}

# Courses left out of repetition and seasonal scoring (fixed dessert variation)
SCORING_EXEMPT_COURSES: Final[tuple] = ("dessert",)

# Decimals kept when scaled quantities are shown (gram precision for kg and l)
QUANTITY_DECIMALS: Final[int] = 3

# Recipe pool feeding each course when the grid is filled automatically (dessert stays manual)
AUTO_FILL_POOLS: Final[dict[str, str]] = {
    "soup": "soup",
    "main1": "main_meat",
    "side1a": "starch",
    "side1b": "vegetable",
    "main2": "main_veggie",
    "side2a": "starch",
    "side2b": "vegetable",
}
# Recipes carrying this tag (salads, spreads, breakfast items) never enter the rotation
NO_ROTATION_TAG: Final[str] = "no-rotation"
