"""Built-in content used when no asset CSVs are present.

Also the source of daily quests and achievements, which are not loaded from files.
"""

from __future__ import annotations

from datetime import datetime

from flavor_quest.models import (
    Achievement,
    CuisineType as C,
    DailyQuest,
    GameDifficulty,
    GamesPlayedRequirement,
    Ingredient,
    IngredientCategory as Cat,
    IngredientRarity as R,
    IngredientsDiscoveredRequirement,
    NutritionalInfo,
    PerfectGamesRequirement,
    QuestRequirement,
    QuestReward,
    QuestType,
    Recipe,
    RecipesCompletedRequirement,
    StreakDaysRequirement,
    TimeRecordRequirement,
    TotalScoreRequirement,
)


def _ing(
    name: str,
    category: Cat,
    cuisines: tuple[C, ...],
    rarity: R,
    fun_fact: str,
    nutrition: NutritionalInfo | None = None,
) -> Ingredient:
    return Ingredient(
        id=name.replace(" ", "-"),
        name=name,
        category=category,
        cuisines=cuisines,
        rarity=rarity,
        nutrition=nutrition,
        fun_fact=fun_fact,
    )


def builtin_ingredients() -> list[Ingredient]:
    return [
        _ing(
            "tomato",
            Cat.vegetable,
            (C.italian, C.mediterranean, C.mexican),
            R.common,
            "Tomatoes are technically fruits, not vegetables!",
            nutrition=NutritionalInfo(
                calories=18, protein=0.9, carbs=3.9, fat=0.2, fiber=1.2, vitamins=("Vitamin C", "Vitamin K")
            ),
        ),
        _ing("onion", Cat.vegetable, (C.french, C.italian, C.indian, C.american), R.common,
             "Onions can make you cry because they release sulfuric compounds when cut."),
        _ing("garlic", Cat.vegetable, (C.italian, C.french, C.chinese, C.mediterranean), R.common,
             "Garlic has been used medicinally for over 5,000 years."),
        _ing("bell pepper", Cat.vegetable, (C.mexican, C.mediterranean, C.american), R.common,
             "Red bell peppers have more vitamin C than oranges!"),
        _ing("mushroom", Cat.vegetable, (C.french, C.italian, C.japanese), R.uncommon,
             "Mushrooms are neither plants nor animals, they're fungi!"),
        _ing("truffle", Cat.vegetable, (C.french, C.italian), R.legendary,
             "Truffles can cost thousands of dollars per pound!"),
        _ing("chicken", Cat.protein, (C.american, C.french, C.chinese, C.indian), R.common,
             "Chicken is the most consumed protein in the world."),
        _ing("salmon", Cat.protein, (C.japanese, C.american, C.french), R.uncommon,
             "Salmon can jump up to 12 feet high!"),
        _ing("wagyu beef", Cat.protein, (C.japanese,), R.legendary,
             "Wagyu cattle are massaged and fed beer for tender meat!"),
        _ing("tofu", Cat.protein, (C.chinese, C.japanese), R.common,
             "Tofu was invented in China over 2,000 years ago."),
        _ing("basil", Cat.herb, (C.italian, C.mediterranean), R.common,
             "Fresh basil has over 40 different flavor compounds!"),
        _ing("cilantro", Cat.herb, (C.mexican, C.indian, C.chinese), R.common,
             "Some people genetically taste cilantro as soap!"),
        _ing("saffron", Cat.spice, (C.french, C.indian, C.mediterranean), R.legendary,
             "Saffron is worth more than gold by weight!"),
        _ing("cardamom", Cat.spice, (C.indian,), R.rare,
             "Cardamom is known as the 'Queen of Spices' in India."),
        _ing("rice", Cat.grain, (C.chinese, C.japanese, C.indian), R.common,
             "Rice feeds more than half of the world's population!"),
        _ing("quinoa", Cat.grain, (C.american,), R.uncommon,
             "Quinoa was considered sacred by the Incas."),
        _ing("parmesan cheese", Cat.dairy, (C.italian,), R.uncommon,
             "Real Parmigiano-Reggiano is aged for at least 12 months."),
        _ing("mozzarella", Cat.dairy, (C.italian,), R.common,
             "Traditional mozzarella is made from water buffalo milk!"),
        _ing("lemon", Cat.fruit, (C.mediterranean, C.french, C.italian), R.common,
             "Lemons were once more valuable than gold in ancient Rome."),
        _ing("avocado", Cat.fruit, (C.mexican, C.american), R.common,
             "Avocados are technically berries!"),
        _ing("olive oil", Cat.oil, (C.mediterranean, C.italian, C.french), R.common,
             "Extra virgin olive oil must be pressed without heat."),
        _ing("honey", Cat.sweetener, (C.mediterranean, C.american), R.common,
             "Honey never spoils; edible honey has been found in Egyptian tombs!"),
    ]


def builtin_recipes(ingredients: list[Ingredient]) -> list[Recipe]:
    by_name = {i.name: i for i in ingredients}

    return [
        Recipe(
            id="margherita-pizza",
            name="Margherita Pizza",
            ingredients=(by_name["tomato"], by_name["basil"], by_name["mozzarella"]),
            cuisine=C.italian,
            difficulty=GameDifficulty.easy,
            cooking_time=900,
            description="A classic Italian pizza with fresh tomatoes, mozzarella, and basil",
            instructions=(
                "Prepare pizza dough",
                "Spread tomato sauce",
                "Add fresh mozzarella",
                "Bake at 450F for 12-15 minutes",
                "Top with fresh basil leaves",
            ),
        ),
        Recipe(
            id="chicken-stir-fry",
            name="Chicken Stir Fry",
            ingredients=(by_name["chicken"], by_name["onion"], by_name["garlic"]),
            cuisine=C.chinese,
            difficulty=GameDifficulty.medium,
            cooking_time=1200,
            description="Quick and healthy chicken stir fry with vegetables",
            instructions=(
                "Cut chicken into bite-sized pieces",
                "Heat oil in wok",
                "Stir fry chicken until cooked",
                "Add vegetables and garlic",
                "Serve over rice",
            ),
        ),
    ]


def builtin_daily_quests(*, expires_at: datetime) -> list[DailyQuest]:
    return [
        DailyQuest(
            id="ingredient-explorer",
            title="Ingredient Explorer",
            description="Discover 5 new ingredients",
            quest_type=QuestType.identify_ingredients,
            requirement=QuestRequirement(target=5, criteria="ingredients"),
            reward=QuestReward(points=100, title="Explorer"),
            expires_at=expires_at,
        ),
        DailyQuest(
            id="speed-chef",
            title="Speed Chef",
            description="Complete a recipe in under 30 seconds",
            quest_type=QuestType.speed_challenge,
            requirement=QuestRequirement(target=1, criteria="speed"),
            reward=QuestReward(points=200, title="Speed Demon"),
            expires_at=expires_at,
        ),
    ]


def builtin_achievements() -> list[Achievement]:
    return [
        Achievement(
            id="first-steps",
            title="First Steps",
            description="Play your first game",
            icon="play.circle",
            points=50,
            requirement=GamesPlayedRequirement(target=1),
        ),
        Achievement(
            id="ingredient-master",
            title="Ingredient Master",
            description="Discover 50 ingredients",
            icon="leaf",
            points=500,
            requirement=IngredientsDiscoveredRequirement(target=50),
        ),
        Achievement(
            id="speed-demon",
            title="Speed Demon",
            description="Complete a game in under 30 seconds",
            icon="bolt",
            points=300,
            requirement=TimeRecordRequirement(target=30),
        ),
        Achievement(
            id="high-scorer",
            title="High Scorer",
            description="Reach a total score of 10,000 points",
            icon="star",
            points=1000,
            requirement=TotalScoreRequirement(target=10_000),
        ),
        Achievement(
            id="perfectionist",
            title="Perfectionist",
            description="Finish 5 games with perfect accuracy",
            icon="checkmark.seal",
            points=400,
            requirement=PerfectGamesRequirement(target=5),
        ),
        Achievement(
            id="recipe-book",
            title="Recipe Book",
            description="Complete 10 recipes",
            icon="book",
            points=300,
            requirement=RecipesCompletedRequirement(target=10),
        ),
        Achievement(
            id="on-fire",
            title="On Fire",
            description="Play 7 days in a row",
            icon="flame",
            points=250,
            requirement=StreakDaysRequirement(target=7),
        ),
    ]
