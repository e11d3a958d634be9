"""
Recommendation engine: scores the static investment catalog against a
user's preferences and returns a category-diverse top 3.

Modules
-------
scorer         : ScoreComponents dataclass + compute_score() + UI label
                 mapping — pure functions, no I/O.
ranker         : classify_category() + score_catalog() + select_diverse()
                 + get_top_recommendations() — the public entry point.
ai_recommender : recommend() — LLM path with automatic fallback to the ranker.
"""
