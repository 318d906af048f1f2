import pytest

from categories import (
    KEY_INSIGHTS_ID,
    aggregate_metrics,
    all_results_category,
    calculate_category_metrics,
    categorize,
    classify,
)
from categories.classifier import weighted_score
from categories.scoring import HeuristicScorer
from categories.registry import CATEGORIES, get_category
from models.category import SubScores
from conftest import FixedScorer, make_result


SOURCES = [make_result(snippet="market revenue growth")]


def _ids(scored):
    return [s.id for s in scored]


def test_weighted_score_doubles_relevance():
    assert weighted_score(SubScores(relevance=80, credibility=60, accuracy=40)) == 65.0


def test_key_insights_first_even_with_lowest_weighted_score():
    table = {c.id: (90, 90, 90) for c in CATEGORIES}
    table[KEY_INSIGHTS_ID] = (71, 71, 71)
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert selected[0].id == KEY_INSIGHTS_ID
    assert len(selected) == 6


def test_never_more_than_six_and_ties_follow_priority():
    table = {c.id: (95, 95, 95) for c in CATEGORIES}
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert _ids(selected) == [
        "key-insights",
        "market-overview",
        "financial-overview",
        "business-strategy",
        "industry-insights",
        "company-information",
    ]


def test_others_sorted_by_weighted_score_descending():
    table = {
        "market-overview": (75, 80, 80),
        "financial-overview": (95, 80, 80),
        "expert-opinions": (85, 80, 80),
    }
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert _ids(selected) == ["financial-overview", "expert-opinions", "market-overview"]


def test_key_insights_dropped_when_any_subscore_misses():
    table = {c.id: (90, 90, 90) for c in CATEGORIES}
    table[KEY_INSIGHTS_ID] = (90, 90, 64)
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert KEY_INSIGHTS_ID not in _ids(selected)
    assert len(selected) == 5


def test_threshold_relaxes_to_65_when_fewer_than_three_pass():
    table = {
        "market-overview": (80, 80, 80),
        "financial-overview": (75, 75, 75),
        "expert-opinions": (65, 65, 65),
    }
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert "expert-opinions" in _ids(selected)
    assert len(selected) == 3


def test_exactly_65_excluded_when_three_pass_at_70():
    table = {
        "market-overview": (80, 80, 80),
        "financial-overview": (75, 75, 75),
        "business-strategy": (70, 70, 70),
        "expert-opinions": (65, 65, 65),
    }
    selected = classify("text", "query", SOURCES, scorer=FixedScorer(table))
    assert "expert-opinions" not in _ids(selected)
    assert len(selected) == 3


def test_below_65_never_qualifies():
    table = {"market-overview": (64.9, 90, 90)}
    assert classify("text", "query", SOURCES, scorer=FixedScorer(table)) == []


def test_empty_input_gives_no_categories_and_zero_metrics():
    assert classify("", "query", []) == []
    assert classify(None, "query", None) == []
    assert categorize([], "query") == []
    assert categorize(None, "query") == []
    assert calculate_category_metrics([], "Market Overview").to_dict() == {
        "relevance": 0.0,
        "accuracy": 0.0,
        "credibility": 0.0,
        "overall": 0.0,
    }
    assert aggregate_metrics([]).overall == 0.0


def test_categorize_files_results_by_keyword_and_leads_with_key_insights():
    results = [
        make_result(title="Market outlook", url="https://a.com/1", snippet="market growth forecast", weight=0.6),
        make_result(title="Quarterly revenue", url="https://b.com/2", snippet="revenue and profit rose", weight=1.0),
        make_result(title="Unrelated", url="https://c.com/3", snippet="weather today", weight=0.8),
    ]
    table = {
        KEY_INSIGHTS_ID: (80, 80, 80),
        "market-overview": (90, 80, 80),
        "financial-overview": (85, 80, 80),
    }
    bundles = categorize(results, "market", scorer=FixedScorer(table))

    assert [b.id for b in bundles] == [KEY_INSIGHTS_ID, "market-overview", "financial-overview"]
    assert [r.url for r in bundles[0].content] == ["https://b.com/2", "https://c.com/3", "https://a.com/1"]
    assert [r.url for r in bundles[1].content] == ["https://a.com/1"]
    assert [r.url for r in bundles[2].content] == ["https://b.com/2"]
    assert "market" in bundles[1].key_terms
    assert bundles[1].to_dict()["keyTerms"] == bundles[1].key_terms


def test_categorize_drops_selected_category_without_matching_results():
    results = [make_result(snippet="market share")]
    table = {"market-overview": (90, 90, 90), "regulatory-information": (90, 90, 90)}
    bundles = categorize(results, "q", scorer=FixedScorer(table))
    assert [b.id for b in bundles] == ["market-overview"]


def test_all_results_category_holds_everything():
    results = [make_result(url="https://a.com"), make_result(url="https://b.com")]
    bundle = all_results_category(results, "q")
    assert bundle.name == "All Results"
    assert len(bundle.content) == 2
    assert bundle.metrics.overall > 0


def test_registry_lookup_by_id_and_name():
    assert get_category("key-insights").is_special
    assert get_category("Market Overview").id == "market-overview"
    assert get_category("nope") is None
    assert len(CATEGORIES) == 10


class TestHeuristicScorer:
    scorer = HeuristicScorer()

    def test_relevance_tracks_keyword_overlap(self):
        market = get_category("market-overview")
        regulatory = get_category("regulatory-information")
        content = "Market growth forecast shows rising demand and a bigger market share"
        assert self.scorer.relevance(market, content, "market outlook") > self.scorer.relevance(
            regulatory, content, "market outlook"
        )
        assert self.scorer.relevance(market, "", "market") == 0.0

    def test_credibility_prefers_reputable_domains(self):
        category = get_category("market-overview")
        reputable = [make_result(url="https://www.reuters.com/x")]
        forum = [make_result(url="https://reddit.com/r/x")]
        assert self.scorer.credibility(category, reputable) > self.scorer.credibility(category, forum)
        assert self.scorer.credibility(category, []) == 0.0

    def test_accuracy_rewards_figures_confirmed_by_two_sources(self):
        category = get_category("financial-overview")
        no_numbers = [make_result(snippet="strong quarter")]
        agreeing = [
            make_result(url="https://a.com", snippet="revenue reached $4.2 billion"),
            make_result(url="https://b.com", snippet="sales of $4.2 billion reported"),
        ]
        disagreeing = [
            make_result(url="https://a.com", snippet="revenue reached $4.2 billion"),
            make_result(url="https://b.com", snippet="sales of $3.9 billion reported"),
        ]
        neutral = self.scorer.accuracy(category, "", no_numbers)
        assert neutral == 75.0
        assert self.scorer.accuracy(category, "", agreeing) > neutral
        assert self.scorer.accuracy(category, "", disagreeing) < neutral

    def test_scores_stay_on_0_to_100_scale(self):
        results = [make_result(url=f"https://site{i}.gov/x", snippet="market market 10% 10%") for i in range(10)]
        content = " ".join(r.text for r in results)
        for category in CATEGORIES:
            for value in (
                self.scorer.relevance(category, content, "market"),
                self.scorer.credibility(category, results),
                self.scorer.accuracy(category, content, results),
            ):
                assert 0.0 <= value <= 100.0


def test_heuristic_classification_end_to_end_puts_key_insights_first():
    results = [
        make_result(
            title=f"Market report {i}",
            url=f"https://www.{domain}/story",
            snippet="Market growth forecast: revenue up 12% as competition and demand rise; "
            "investors and venture capital funds increase investment",
        )
        for i, domain in enumerate(["reuters.com", "bloomberg.com", "wsj.com", "ft.com"])
    ]
    selected = classify(None, "market growth investment", results)
    assert selected
    assert selected[0].id == KEY_INSIGHTS_ID
    assert len(selected) <= 6



def test_market_scenario_bundle_metrics():
    results = [
        make_result(
            title=f"Cloud computing outlook {i}",
            url=f"https://www.{domain}/cloud",
            snippet="Cloud computing market growth forecast: demand up 12% on a $500 billion market size",
        )
        for i, domain in enumerate(["reuters.com", "bloomberg.com", "wsj.com"])
    ]

    bundles = {b.id: b for b in categorize(results, "cloud computing market growth")}

    market = bundles["market-overview"]
    assert len(market.content) == 3
    assert market.metrics.accuracy == pytest.approx(0.85)
    assert market.metrics.credibility == pytest.approx(0.9)
    assert market.metrics.overall == pytest.approx(0.84)
    assert next(iter(bundles)) == KEY_INSIGHTS_ID

@pytest.mark.parametrize(
    "name, expected",
    [
        ("Market Overview", {"relevance": 0.8, "accuracy": 0.85, "credibility": 0.9, "overall": 0.84}),
        ("Technology Trends", {"relevance": 0.85, "accuracy": 0.8, "credibility": 0.7, "overall": 0.795}),
        ("Recent News", {"relevance": 0.9, "accuracy": 0.75, "credibility": 0.75, "overall": 0.81}),
        ("Expert Opinions", {"relevance": 0.8, "accuracy": 0.75, "credibility": 0.7, "overall": 0.76}),
    ],
)
def test_category_metrics_nudged_by_name(name, expected):
    metrics = calculate_category_metrics([make_result()], name, "q").to_dict()
    for key, value in expected.items():
        assert metrics[key] == pytest.approx(value, abs=0.006)


def test_aggregate_metrics_is_mean_of_categories():
    results = [make_result()]
    bundles = [
        all_results_category(results),
        categorize(results, "q", scorer=FixedScorer({KEY_INSIGHTS_ID: (90, 90, 90)}))[0],
    ]
    bundles[1].metrics = calculate_category_metrics(results, "Market Overview")
    agg = aggregate_metrics(bundles)
    assert agg.accuracy == pytest.approx((0.75 + 0.85) / 2, abs=0.005)
    assert agg.credibility == pytest.approx((0.7 + 0.9) / 2, abs=0.005)
