import httpx
import pytest
from backend.search_core.cache import TTLCache
from backend.search_core.schemas import TaxonomyEntry
from backend.search_core.taxonomy import (
    EXTRACTION_ORDER,
    TaxonomyExtractor,
    TaxonomySource,
    UpstreamUnavailable,
    build_index,
    match_phrase,
)
from backend.search_core.types import TaxonomyCategory


def _entry(id_, en, hr):
    return TaxonomyEntry(id=id_, nameEn=en, nameHr=hr)


def _source(transport, clock=None) -> TaxonomySource:
    return TaxonomySource(
        "http://taxonomy.test/taxonomy",
        client=httpx.Client(transport=transport),
        cache=TTLCache("taxonomy-failures", default_ttl=600, clock=clock),
    )


class TestBuildIndex:
    def test_registers_both_names(self):
        index = build_index([_entry(1, "Breakfast", "Doručak")], TaxonomyCategory.MEAL_TYPES)
        assert index["breakfast"] == 1
        assert index["dorucak"] == 1

    def test_registers_synonyms_for_matching_canonical(self):
        index = build_index(
            [_entry(20, "Outdoor seating", "Vanjska terasa")], TaxonomyCategory.ESTABLISHMENT_PERKS
        )
        assert index["terasa"] == 20
        assert index["garden"] == 20
        assert index["vanjska terasa"] == 20

    def test_skips_synonyms_without_catalog_entry(self):
        index = build_index([_entry(1, "Pizza", "Pizza")], TaxonomyCategory.FOOD_TYPES)
        assert "sushi" not in index
        assert "susi" not in index

    def test_synonyms_are_scoped_to_their_category(self):
        index = build_index([_entry(5, "Vegan", "Veganski")], TaxonomyCategory.FOOD_TYPES)
        assert "plant based" not in index

    def test_empty_catalog(self):
        assert build_index([], TaxonomyCategory.ALLERGENS) == {}

    def test_later_registration_wins(self):
        index = build_index(
            [_entry(1, "Grah", "Grah"), _entry(2, "Grah", "Grah")], TaxonomyCategory.FOOD_TYPES
        )
        assert index["grah"] == 2


def test_match_phrase_falls_back_to_leading_tokens():
    index = {"pizza": 1, "free parking": 2}
    assert match_phrase("pizza", index) == 1
    assert match_phrase("pizza margherita velika", index) == 1
    assert match_phrase("free parking please", index) == 2
    assert match_phrase("velika pizza", index) is None
    assert match_phrase("", index) is None


def test_extraction_order_is_fixed():
    assert EXTRACTION_ORDER == (
        TaxonomyCategory.FOOD_TYPES,
        TaxonomyCategory.ESTABLISHMENT_PERKS,
        TaxonomyCategory.ESTABLISHMENT_TYPES,
        TaxonomyCategory.MEAL_TYPES,
        TaxonomyCategory.DIETARY_TYPES,
        TaxonomyCategory.ALLERGENS,
        TaxonomyCategory.PRICE_CATEGORIES,
    )


class TestExtractTaxonomies:
    def test_matches_each_phrase_into_its_bucket(self, extractor):
        result = extractor.extract("vegan, terasa, pizza")
        assert result.ids.dietary_type_ids == [40]
        assert result.ids.establishment_perk_ids == [20]
        assert result.ids.food_type_ids == [1]
        assert result.leftover_terms == []
        assert result.matched_terms == {"vegan": 40, "terasa": 20, "pizza": 1}

    def test_unmatched_prompt_is_leftover(self, extractor):
        result = extractor.extract("zzqqxxnomatch")
        assert result.ids.is_empty()
        assert result.leftover_terms == ["zzqqxxnomatch"]
        assert result.matched_terms == {}

    def test_leftovers_keep_casing_and_order(self, extractor):
        result = extractor.extract("Nešto Fino, doručak, Domaći Kruh, jeftino")
        assert result.leftover_terms == ["Nešto Fino", "Domaći Kruh"]
        assert result.ids.meal_type_ids == [30]
        assert result.ids.price_category_ids == [60]

    def test_accents_and_case_are_ignored(self, extractor):
        result = extractor.extract("ĆEVAPI, Cevapi")
        assert result.ids.food_type_ids == [3]
        assert result.matched_terms == {"ĆEVAPI": 3, "Cevapi": 3}

    def test_ids_are_deduplicated(self, extractor):
        result = extractor.extract("pizza, pizze, pica")
        assert result.ids.food_type_ids == [1]
        assert len(result.matched_terms) == 3

    def test_trailing_tokens_are_dropped(self, extractor):
        result = extractor.extract("pizza margherita")
        assert result.ids.food_type_ids == [1]
        assert result.matched_terms == {"pizza margherita": 1}

    def test_earlier_category_wins_ambiguous_phrase(self, extractor):
        # "brunch" names both a brunch place and a meal type
        result = extractor.extract("brunch")
        assert result.ids.establishment_type_ids == [12]
        assert result.ids.meal_type_ids == []

    def test_gluten_free_resolves_to_dietary_before_allergen(self, extractor):
        result = extractor.extract("bez glutena")
        assert result.ids.dietary_type_ids == [41]
        assert result.ids.allergen_ids == []

    def test_empty_prompt(self, extractor):
        result = extractor.extract(" , ,")
        assert result.ids.is_empty()
        assert result.leftover_terms == []

    def test_result_carries_catalog(self, extractor):
        result = extractor.extract("pizza")
        assert result.taxonomies is not None
        assert [e.id for e in result.taxonomies.entries(TaxonomyCategory.ALLERGENS)] == [50]

    def test_as_dict_exposes_every_bucket(self, extractor):
        payload = extractor.extract("pizza, vegan").ids.as_dict()
        assert payload["food_type_ids"] == [1]
        assert payload["dietary_type_ids"] == [40]
        assert set(payload) == {c.ids_field for c in TaxonomyCategory}


class TestTaxonomyCache:
    def test_catalog_is_fetched_once_within_ttl(self, extractor, taxonomy_transport, clock):
        extractor.extract("pizza")
        clock.advance(599)
        extractor.extract("vegan")
        assert taxonomy_transport.calls == 1

    def test_catalog_is_refetched_after_ttl(self, extractor, taxonomy_transport, clock):
        extractor.extract("pizza")
        clock.advance(600)
        extractor.extract("pizza")
        assert taxonomy_transport.calls == 2

    def test_clear_forces_refetch(self, taxonomy_source, taxonomy_transport):
        taxonomy_source.get_taxonomies()
        taxonomy_source.cache.clear()
        taxonomy_source.get_taxonomies()
        assert taxonomy_transport.calls == 2

    def test_request_targets_configured_url(self, taxonomy_source, taxonomy_transport):
        taxonomy_source.get_taxonomies()
        assert str(taxonomy_transport.requests[0].url) == taxonomy_source.url


class TestTaxonomyFailures:
    def test_http_error_status(self, make_transport):
        source = _source(make_transport(lambda r: httpx.Response(503, text="down")))
        with pytest.raises(UpstreamUnavailable, match="503"):
            source.get_taxonomies()

    def test_ok_false(self, make_transport):
        source = _source(make_transport(lambda r: httpx.Response(200, json={"ok": False})))
        with pytest.raises(UpstreamUnavailable, match="Bad taxonomy payload"):
            source.get_taxonomies()

    def test_missing_result(self, make_transport):
        source = _source(make_transport(lambda r: httpx.Response(200, json={"ok": True})))
        with pytest.raises(UpstreamUnavailable):
            source.get_taxonomies()

    def test_malformed_result(self, make_transport, taxonomy_payload):
        taxonomy_payload["result"]["foodTypes"] = "pizza"
        source = _source(make_transport(lambda r: httpx.Response(200, json=taxonomy_payload)))
        with pytest.raises(UpstreamUnavailable):
            source.get_taxonomies()

    def test_missing_category(self, make_transport, taxonomy_payload):
        del taxonomy_payload["result"]["allergens"]
        source = _source(make_transport(lambda r: httpx.Response(200, json=taxonomy_payload)))
        with pytest.raises(UpstreamUnavailable):
            source.get_taxonomies()

    def test_non_json_body(self, make_transport):
        source = _source(make_transport(lambda r: httpx.Response(200, text="<html>")))
        with pytest.raises(UpstreamUnavailable):
            source.get_taxonomies()

    def test_network_error(self, make_transport):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source = _source(make_transport(handler))
        with pytest.raises(UpstreamUnavailable) as excinfo:
            source.get_taxonomies()
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_failure_is_not_cached(self, make_transport, taxonomy_payload):
        responses = [httpx.Response(500), httpx.Response(200, json=taxonomy_payload)]
        transport = make_transport(lambda r: responses.pop(0))
        source = _source(transport)
        with pytest.raises(UpstreamUnavailable):
            source.get_taxonomies()
        assert source.get_taxonomies().food_types[0].name_en == "Pizza"
        assert transport.calls == 2

    def test_extraction_propagates_failure(self, make_transport):
        extractor = TaxonomyExtractor(_source(make_transport(lambda r: httpx.Response(500))))
        with pytest.raises(UpstreamUnavailable):
            extractor.extract("pizza")


def test_module_level_helpers_use_default_extractor(monkeypatch, extractor, taxonomy_transport):
    from backend.search_core import taxonomy

    monkeypatch.setattr(taxonomy, "_default_extractor", extractor)
    assert taxonomy.extract_taxonomies_from_prompt("pizza").ids.food_type_ids == [1]
    assert taxonomy.get_taxonomies().meal_types[1].name_en == "Brunch"
    assert taxonomy_transport.calls == 1


class TestInjectedCache:
    def test_source_keeps_empty_injected_cache(self, taxonomy_transport, clock):
        injected = TTLCache("taxonomy-injected", default_ttl=30, clock=clock)
        source = TaxonomySource(
            "http://taxonomy.test/taxonomy",
            client=httpx.Client(transport=taxonomy_transport),
            cache=injected,
        )
        assert source.cache is injected

        source.get_taxonomies()
        assert len(injected) == 1
        clock.advance(30)
        source.get_taxonomies()
        assert taxonomy_transport.calls == 2

    def test_disabled_cache_fetches_every_time(self, taxonomy_transport):
        source = TaxonomySource(
            "http://taxonomy.test/taxonomy",
            client=httpx.Client(transport=taxonomy_transport),
            cache=TTLCache("taxonomy-off", default_ttl=600, enabled=False),
        )
        source.get_taxonomies()
        source.get_taxonomies()
        assert taxonomy_transport.calls == 2


def test_close_releases_http_client(taxonomy_source):
    taxonomy_source.close()
    assert taxonomy_source._client.is_closed
