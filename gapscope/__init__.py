"""
gapscope - Keyword Gap Analysis Engine

Finds the keywords competitors win that a primary domain does not:
1. Merges ranking data for a domain and its competitors (DataForSEO)
2. Classifies gap / shared / missing keywords
3. Scores relevance, competitive advantage and opportunity tier
4. Balances results across competitors and flags the top opportunities
5. Falls back across providers (direct, domain intersection, Claude, mock)
"""

__version__ = "0.1.0"
