"""
Unit tests for directory synthesis: placement, ordering, dedupe, display names.
"""

from regiondir.ingest import ingest_rows
from regiondir.synthesize import dataset_stats, synthesize


def _build(records, region_names=None):
    return synthesize(ingest_rows(records).listings, region_names)


def _names(dataset, slug, category):
    return [l.name for l in dataset[slug].categories[category]]


def _regions_holding(dataset, name, category):
    return [s for s in sorted(dataset) if any(l.name == name for l in dataset[s].categories.get(category, []))]


class TestScenarioA:
    def test_featured_listing_spans_both_regions(self, scenario_a_records):
        dataset = _build(scenario_a_records).dataset

        assert sorted(dataset) == ["loving-county-texas", "reeves-county-texas"]
        assert _names(dataset, "reeves-county-texas", "1031 Exchange Services") == ["Accruit", "Zeta Co"]
        assert _names(dataset, "loving-county-texas", "1031 Exchange Services") == ["Accruit"]


class TestPlacement:
    def test_listing_lands_in_exactly_its_regions(self, record):
        dataset = _build(
            [
                record(name="Multi", category="Landmen", regions="a-one, b-two, c-three"),
                record(name="Solo", category="Landmen", regions="b-two"),
            ]
        ).dataset

        assert _regions_holding(dataset, "Multi", "Landmen") == ["a-one", "b-two", "c-three"]
        assert _regions_holding(dataset, "Solo", "Landmen") == ["b-two"]

    def test_categories_are_case_sensitive_keys(self, record):
        dataset = _build(
            [
                record(name="One", category="Mineral Buyers"),
                record(name="Two", category="mineral buyers"),
            ]
        ).dataset

        assert sorted(dataset["reeves-county-texas"].categories) == ["Mineral Buyers", "mineral buyers"]

    def test_every_region_has_an_entry(self, record):
        dataset = _build([record(regions="x-one, y-two"), record(name="B", regions="z-three")]).dataset

        for region in dataset.values():
            assert region.placement_count() > 0
        assert set(dataset) == {"x-one", "y-two", "z-three"}


class TestOrdering:
    def test_featured_first_then_name_case_insensitive(self, record):
        dataset = _build(
            [
                record(name="zeta", featured=False),
                record(name="Beta", featured=True),
                record(name="alpha", featured=False),
                record(name="Alder", featured=True),
                record(name="Bravo", featured=False),
            ]
        ).dataset

        assert _names(dataset, "reeves-county-texas", "Mineral Buyers") == ["Alder", "Beta", "alpha", "Bravo", "zeta"]

    def test_ties_keep_row_order(self, record):
        dataset = _build(
            [
                record(name="ACME", description="first"),
                record(name="acme", description="second"),
            ]
        ).dataset

        bucket = dataset["reeves-county-texas"].categories["Mineral Buyers"]
        assert [l.description for l in bucket] == ["first", "second"]

    def test_arrival_order_does_not_change_result(self, record):
        rows = [
            record(name="C", featured=True),
            record(name="a"),
            record(name="B", featured=True),
        ]
        listings = ingest_rows(rows).listings

        assert synthesize(listings).dataset == synthesize(list(reversed(listings))).dataset


class TestDedupe:
    def test_identical_triple_collapses_to_first(self, record):
        result = _build(
            [
                record(name="Accruit", description="first", regions="reeves-county-texas"),
                record(name="Accruit", description="second", regions="reeves-county-texas"),
            ]
        )

        bucket = result.dataset["reeves-county-texas"].categories["Mineral Buyers"]
        assert [l.description for l in bucket] == ["first"]
        assert result.duplicates == 1

    def test_duplicate_only_collapses_in_shared_region(self, record):
        result = _build(
            [
                record(name="Accruit", regions="reeves-county-texas"),
                record(name="Accruit", regions="reeves-county-texas, loving-county-texas"),
            ]
        )

        assert _names(result.dataset, "reeves-county-texas", "Mineral Buyers") == ["Accruit"]
        assert _names(result.dataset, "loving-county-texas", "Mineral Buyers") == ["Accruit"]
        assert result.duplicates == 1

    def test_same_name_other_category_is_not_a_duplicate(self, record):
        result = _build([record(name="Accruit", category="A"), record(name="Accruit", category="B")])

        assert result.duplicates == 0
        assert dataset_stats(result.dataset) == {"regions": 1, "categories": 2, "placements": 2}

    def test_repeated_ingestion_is_idempotent(self, scenario_a_records):
        once = _build(scenario_a_records).dataset
        twice = _build(scenario_a_records + scenario_a_records).dataset

        assert once == twice


class TestDisplayName:
    def test_reference_and_fallback(self, scenario_a_records):
        dataset = _build(scenario_a_records, {"reeves-county-texas": "Reeves County, Texas"}).dataset

        assert dataset["reeves-county-texas"].display_name == "Reeves County, Texas"
        assert dataset["loving-county-texas"].display_name == "Loving County Texas"
