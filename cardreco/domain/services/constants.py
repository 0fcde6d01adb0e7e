# Recommendation strategies
STRATEGY_CONTENT = "content"              # similar to one reference card
STRATEGY_COLLABORATIVE = "collaborative"  # bought by customers with overlapping purchases
STRATEGY_HISTORY = "history"              # matches the customer's own purchase profile
STRATEGY_POPULAR = "popular"              # most units sold
STRATEGY_HYBRID = "hybrid"                # weighted fusion of the above
STRATEGY_GENERATIVE = "generative"        # LLM-picked, with hybrid backfill

ALL_STRATEGIES = {
    STRATEGY_CONTENT,
    STRATEGY_COLLABORATIVE,
    STRATEGY_HISTORY,
    STRATEGY_POPULAR,
    STRATEGY_HYBRID,
    STRATEGY_GENERATIVE,
}

# Rarity tiers, lowercase keys. Store-specific tiers sit above Mythic.
RARITY_TIERS = {
    "common": 1,
    "uncommon": 2,
    "rare": 3,
    "legendary": 4,
    "mythic": 5,
    "epic": 6,
    "ultra": 6,
    "secret": 6,
}

# Card type ranks used as the categorical axis of the feature vector
TYPE_RANKS = {
    "electric": 1, "fire": 2, "water": 3, "grass": 4, "psychic": 5,
    "fighting": 6, "normal": 7, "flying": 8, "poison": 9, "ground": 10,
    "rock": 11, "bug": 12, "ghost": 13, "steel": 14, "ice": 15,
    "dragon": 16, "dark": 17, "fairy": 18,
}

# Price buckets (upper bounds, exclusive)
PRICE_BUDGET_MAX = 50.0
PRICE_MID_MAX = 200.0

# Content strategy: |price delta| under this share of the reference price is "similar"
SIMILAR_PRICE_RATIO = 0.3

# History strategy: candidate band and scoring band around the observed price range
HISTORY_CANDIDATE_BAND = (0.7, 1.3)
HISTORY_SCORING_BAND = (0.8, 1.2)
HISTORY_TYPE_POINTS = 3
HISTORY_RARITY_POINTS = 2
HISTORY_PRICE_POINTS = 1

# Generative strategy: positional score decay
GENERATIVE_SCORE_STEP = 0.05

# Human-readable reasons
REASON_SAME_TYPE = "same type"
REASON_SAME_RARITY = "same rarity"
REASON_SIMILAR_PRICE = "similar price"
REASON_SIMILAR_CUSTOMERS = "customers with similar taste bought this"
REASON_POPULAR = "popular in catalog"
REASON_PRICE_RANGE = "price within your usual range"
REASON_AI = "personalized AI recommendation"
REASON_AI_HISTORY = "based on your purchase history"
REASON_AI_NO_HISTORY = "based on catalog highlights (no purchase history yet)"
