"""
AI Core Module - matching and answer generation.

Key responsibilities:
- FAQ matching (keyword heuristic, pluggable scorer)
- Answer synthesis (rule-based baseline, LLM rewrite via gen_ai_hub)
"""
