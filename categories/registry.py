"""Fixed category registry, built once at import time."""

from models.category import Category

KEY_INSIGHTS_ID = "key-insights"
ALL_RESULTS_ID = "all-results"

CATEGORIES: tuple[Category, ...] = (
    Category(
        id=KEY_INSIGHTS_ID,
        name="Key Insights",
        priority=0,
        color="#0F9D58",
        icon="lightbulb",
        is_special=True,
        description="Most important insights from all sources",
        keywords=("insight", "key", "important", "highlight", "summary", "takeaway", "finding", "conclusion"),
    ),
    Category(
        id="market-overview",
        name="Market Overview",
        priority=1,
        color="#4285F4",
        icon="chart-line",
        description="Market trends, analysis, and forecasts",
        keywords=(
            "market", "analysis", "trend", "forecast", "growth", "decline", "market share",
            "competition", "competitive", "market size", "segment", "outlook", "demand",
        ),
    ),
    Category(
        id="financial-overview",
        name="Financial Overview",
        priority=2,
        color="#34A853",
        icon="chart-bar",
        description="Financial metrics, reports, and performance data",
        keywords=(
            "financial", "finance", "revenue", "profit", "earnings", "income", "cash flow",
            "quarterly", "annual", "fiscal", "ebitda", "margin", "valuation", "funding", "raised",
        ),
    ),
    Category(
        id="business-strategy",
        name="Business Strategy",
        priority=3,
        color="#9C27B0",
        icon="chess",
        description="Strategic direction, positioning, and go-to-market",
        keywords=(
            "strategy", "strategic", "business model", "positioning", "go-to-market", "expansion",
            "partnership", "pricing", "competitive advantage", "roadmap", "pivot", "scale",
        ),
    ),
    Category(
        id="industry-insights",
        name="Industry Insights",
        priority=4,
        color="#FBBC05",
        icon="industry",
        description="Industry-specific trends and developments",
        keywords=(
            "industry", "sector", "vertical", "innovation", "disruption", "transformation",
            "technology", "adoption", "emerging", "startup", "ecosystem", "landscape",
        ),
    ),
    Category(
        id="company-information",
        name="Company Information",
        priority=5,
        color="#EA4335",
        icon="building",
        description="Company profiles, leadership, and operations",
        keywords=(
            "company", "corporation", "founder", "ceo", "executive", "leadership", "headquarters",
            "employee", "acquisition", "merger", "subsidiary", "team", "founded",
        ),
    ),
    Category(
        id="investment-strategies",
        name="Investment Strategies",
        priority=6,
        color="#3F51B5",
        icon="money-bill-wave",
        description="Investment approaches, strategies, and recommendations",
        keywords=(
            "investment", "investor", "portfolio", "allocation", "venture capital", "vc",
            "private equity", "fund", "seed", "series a", "return", "risk", "deal",
        ),
    ),
    Category(
        id="economic-indicators",
        name="Economic Indicators",
        priority=7,
        color="#009688",
        icon="chart-area",
        description="Macroeconomic data and indicators",
        keywords=(
            "economic", "economy", "gdp", "inflation", "unemployment", "interest rate",
            "recession", "consumer spending", "federal reserve", "monetary", "fiscal policy",
        ),
    ),
    Category(
        id="regulatory-information",
        name="Regulatory Information",
        priority=8,
        color="#795548",
        icon="gavel",
        description="Regulation, compliance, and legal developments",
        keywords=(
            "regulation", "regulatory", "compliance", "law", "legal", "sec", "antitrust",
            "policy", "legislation", "lawsuit", "license", "filing",
        ),
    ),
    Category(
        id="expert-opinions",
        name="Expert Opinions",
        priority=9,
        color="#FF5722",
        icon="user-tie",
        description="Analyst and expert commentary",
        keywords=(
            "expert", "analyst", "opinion", "commentary", "perspective", "believes", "predicts",
            "according to", "interview", "says", "view",
        ),
    ),
)

_BY_ID = {c.id: c for c in CATEGORIES}
_BY_NAME = {c.name.lower(): c for c in CATEGORIES}


def get_category(id_or_name: str) -> Category | None:
    key = (id_or_name or "").strip().lower()
    return _BY_ID.get(key) or _BY_NAME.get(key)
