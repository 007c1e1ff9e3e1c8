import itertools

from processing.analyzer import (
    analyze,
    detect_category,
    detect_regions,
    extract_keywords,
    extract_tags,
)


def test_analyze_cluster_story():
    """A Tiruppur knitwear story is placed in India/Asia and spotlighted as a cluster."""
    result = analyze(
        "Tiruppur knitwear exports rise",
        "Garment units in Tiruppur, India report higher cotton yarn demand.",
    )
    assert result.regions.cities == ("Tirupur",)
    assert result.regions.countries == ("India",)
    assert result.regions.continents == ("Asia",)
    assert result.sectors == ("Cotton", "Yarn", "Knitting", "Garments")
    assert result.category == "Cluster Spotlight"
    assert result.relevance_score == 100


def test_regions_whole_word_only():
    """'uk' must not match inside 'ukraine'."""
    regions = detect_regions("ukraine grain corridor reopens")
    assert regions.countries == ()
    assert regions.continents == ()


def test_regions_multiple_cities_and_continents():
    regions = detect_regions("exports from paris and dhaka")
    assert regions.cities == ("Dhaka", "Paris")
    assert regions.countries == ("Bangladesh", "France")
    assert regions.continents == ("Asia", "Europe")


def test_regions_multiword_keyword():
    regions = detect_regions("mills near ho chi minh expand")
    assert regions.cities == ("Ho Chi Minh City",)
    assert regions.countries == ("Vietnam",)


def test_category_title_bonus():
    """A single title hit (1 + 3) beats three body-only hits."""
    assert detect_category("tariff talk the market market market", "Tariff talk") == "Trade"


def test_category_tie_goes_to_first():
    assert detect_category("price and policy", "Price and policy") == "Markets"


def test_category_defaults_to_industry():
    assert detect_category("nothing to see here", "Nothing") == "Industry"


def test_extract_tags_patterns_and_hashtags():
    text = "wto backs rcep new cotton price index and oeko-tex rules. #sustainability #ok"
    tags = extract_tags(text, existing_tags=["Source"])
    assert tags == ("Source", "rcep", "wto", "cotton-price", "oeko-tex", "sustainability")


def test_extract_tags_capped_at_ten():
    existing = [f"t{i}" for i in range(12)]
    tags = extract_tags("tariff quota subsidy", existing_tags=existing)
    assert len(tags) == 10
    assert tags == tuple(existing[:10])


def test_extract_keywords_frequency_order():
    keywords = extract_keywords("cotton cotton yarn yarn cotton spinning mills said")
    assert keywords == ("cotton", "yarn", "spinning", "mills")


def test_extract_keywords_limit():
    text = " ".join(f"word{i:02d}" for i in range(30))
    assert len(extract_keywords(text)) == 15


def test_score_floor_for_irrelevant_text():
    result = analyze("Hello", "")
    assert result.relevance_score == 50
    assert result.category == "Industry"
    assert result.sectors == ()


def test_score_always_within_bounds():
    """Relevance stays in [50, 100] across combinations of regions, sectors and length."""
    titles = ["", "Cotton yarn export news from China", "Weather update"]
    places = ["", "Tiruppur India", "Dhaka Bangladesh Shaoxing China Hanoi Vietnam Karachi Pakistan Bursa Turkey"]
    sectors = ["", "cotton yarn knitting garment trade denim polyester"]
    lengths = [0, 600, 1200]

    for title, place, sector, length in itertools.product(titles, places, sectors, lengths):
        body = f"{place} {sector} " + "x" * length
        score = analyze(title, body).relevance_score
        assert 50 <= score <= 100


def test_analyze_is_deterministic():
    title = "Bangladesh RMG exporters seek tariff relief"
    body = "BGMEA says #garment exporters in Dhaka face higher import duty on polyester."
    first = analyze(title, body)
    second = analyze(title, body)
    assert first == second
