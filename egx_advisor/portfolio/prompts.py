"""Prompt templates for portfolio-level advice."""

PORTFOLIO_ANALYSIS_PROMPT = """You are an expert financial advisor specializing in the \
Egyptian Exchange (EGX). Analyze this investment portfolio.

PORTFOLIO DATA:
{portfolio_data}

Provide a comprehensive portfolio analysis covering:
1. Overall health assessment
2. Strengths of this portfolio
3. Weaknesses and risks
4. Diversification quality (sector concentration, single stock risk)
5. Specific actionable recommendations
6. Top performers and underperformers

RESPONSE FORMAT (JSON):
{{
  "overallHealth": "Strong" | "Good" | "Fair" | "Weak",
  "summary": "<2-3 sentence portfolio summary>",
  "strengths": ["<strength 1>", "<strength 2>", "<strength 3>"],
  "weaknesses": ["<weakness 1>", "<weakness 2>", "<weakness 3>"],
  "recommendations": ["<specific actionable recommendation 1>", "<recommendation 2>"],
  "diversificationScore": "Well Diversified" | "Moderately Diversified" | "Concentrated",
  "riskLevel": "Low" | "Medium" | "High",
  "sectorBreakdown": "<brief sector concentration analysis>",
  "topPerformers": ["<stock symbol and why>"],
  "underperformers": ["<stock symbol and why>"]
}}

Be specific with numbers. Reference actual stocks and values from the portfolio.
Respond ONLY with valid JSON, no markdown."""

MARKET_PRICES_SECTION = """
CURRENT REAL-TIME EGX MARKET PRICES (as of today, use ONLY these prices - do NOT use \
prices from your training data):
{prices}
"""

DEPLOY_CAPITAL_PROMPT = """You are an expert financial advisor specializing in the \
Egyptian Exchange (EGX). A client wants to deploy {amount} EGP into their portfolio.

CURRENT PORTFOLIO:
{portfolio_data}
{market_prices_section}
AMOUNT TO DEPLOY: {amount} EGP

Recommend how to allocate this capital. Options:
- Increase existing positions (stocks already in portfolio)
- Add new EGX stocks not currently in portfolio
- Mix of both

Consider:
- Current portfolio balance and diversification
- Which positions are underweight
- Which sectors need more exposure
- Valuation opportunities in current market
- Risk management

CRITICAL: Use the CURRENT REAL-TIME MARKET PRICES provided above for all price references \
and buy zone calculations.

RESPONSE FORMAT (JSON):
{{
  "strategy": "<brief 1-2 sentence strategy summary>",
  "allocations": [
    {{
      "symbol": "<EGX stock symbol>",
      "nameEn": "<company name>",
      "amountEGP": <number>,
      "percentage": <number 0-100>,
      "reason": "<why this stock and this amount>",
      "isNewPosition": <true if not in current portfolio>,
      "buyZone": {{"low": <entry price low end>, "high": <entry price high end>}}
    }}
  ],
  "reasoning": "<detailed paragraph explaining the overall allocation strategy>",
  "riskNote": "<brief risk disclaimer or caution>"
}}

IMPORTANT:
- Allocations must sum to {amount} EGP
- Be specific with stock symbols and amounts
- Reference actual portfolio data in reasoning
- buyZone must be a realistic range around the current real-time price

Respond ONLY with valid JSON, no markdown."""

AMOUNT_SECTION = "\nThe client has {amount} EGP to deploy."

COMPARE_STOCKS_PROMPT = """You are an expert financial advisor specializing in the \
Egyptian Exchange (EGX). A client wants you to compare these stocks and advise which to buy.

STOCKS TO COMPARE (with CURRENT REAL-TIME prices - use ONLY these, NOT your training data):
{stock_data}

CLIENT'S CURRENT PORTFOLIO:
{portfolio_data}
{amount_section}

You may recommend ANY of these outcomes:
1. Buy one of the compared stocks
2. Split the money between the compared stocks
3. Skip ALL compared stocks and add to an EXISTING portfolio stock instead
4. Keep as dry powder (cash) and buy nothing right now
5. Mix: some in compared stock(s), some elsewhere

Consider growth potential, long-term value, current valuation, buy urgency, fit with the \
existing portfolio, diversification impact and market timing.

RESPONSE FORMAT (JSON):
{{
  "verdict": "<clear 1-2 sentence verdict>",
  "action": "buy_one" | "split" | "existing_stock" | "dry_powder" | "mixed",
  "rankings": [
    {{
      "symbol": "<stock symbol>",
      "nameEn": "<company name>",
      "growthScore": <1-10>,
      "longTermScore": <1-10>,
      "buyUrgency": "Buy Now" | "Can Wait" | "Avoid",
      "summary": "<2-3 sentence analysis of this stock>"
    }}
  ],
  "allocation": [
    {{
      "symbol": "<stock symbol or existing portfolio stock>",
      "nameEn": "<company name>",
      "amountEGP": <number or 0 if no amount specified>,
      "percentage": <number 0-100>,
      "isFromCompared": <true if from compared list>
    }}
  ],
  "reasoning": "<detailed paragraph explaining your recommendation>",
  "riskNote": "<brief risk disclaimer>"
}}

IMPORTANT:
- Rankings must include ALL compared stocks
- For dry powder use [{{"symbol": "CASH", "nameEn": "Dry Powder (Cash)", "amountEGP": \
<amount>, "percentage": 100, "isFromCompared": false}}]
- Reference actual numbers from the data

Respond ONLY with valid JSON, no markdown."""
