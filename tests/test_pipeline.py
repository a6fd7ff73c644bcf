import json

import pytest

from conftest import FakeGateway, dishes_reply

from dishlingo.errors import (
    BatchSizeError,
    ErrorCode,
    NoDishesExtractedError,
    NotMenuImagesError,
)
from dishlingo.menu_pipeline.dish_schema import LEVELS, PLACEHOLDER_NAME
from dishlingo.menu_pipeline.pipeline import MenuAnalysisPipeline


def ramen_gateway(**overrides):
    script = dict(
        validate="YES",
        extract={"img1": dishes_reply("Tonkotsu Ramen", "Gyoza"), "img2": dishes_reply("Tonkotsu Ramen")},
        pronounce=json.dumps({"Tonkotsu Ramen": "ton-KOT-soo", "Gyoza": "GYOH-zah"}),
        allergens=json.dumps({"Tonkotsu Ramen": "wheat, egg", "Gyoza": "wheat, soy"}),
    )
    script.update(overrides)
    return FakeGateway(**script)


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 6])
async def test_batch_size_policy(count):
    gateway = FakeGateway()
    with pytest.raises(BatchSizeError) as exc_info:
        await MenuAnalysisPipeline(gateway).run(["img"] * count)
    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code is ErrorCode.BATCH_SIZE
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_five_images_accepted():
    gateway = FakeGateway(validate="YES", extract=dishes_reply("Pho"), pronounce="{}", allergens="{}")
    dishes = await MenuAnalysisPipeline(gateway).analyze([f"img{i}" for i in range(5)])
    assert [d.page for d in dishes] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_not_menu_images_stops_before_extraction():
    gateway = FakeGateway(validate="NO")
    with pytest.raises(NotMenuImagesError):
        await MenuAnalysisPipeline(gateway).run(["img1", "img2"])
    assert set(gateway.kinds()) == {"validate"}


@pytest.mark.asyncio
async def test_full_run_pages_order_and_enrichment():
    report = await MenuAnalysisPipeline(ramen_gateway()).run(["img1", "img2"])

    assert report.enriched
    assert [(d.original_name, d.page) for d in report.dishes] == [
        ("Tonkotsu Ramen", 1),
        ("Gyoza", 1),
        ("Tonkotsu Ramen", 2),
    ]
    first, _, second = report.dishes
    assert first.pronunciation == second.pronunciation == "ton-KOT-soo"
    assert first.allergens == second.allergens == "wheat, egg"
    for dish in report.dishes:
        assert dish.original_name and dish.simple_description
        assert {dish.nutrition.calories, dish.nutrition.sugar, dish.nutrition.unhealthy_fat} <= set(LEVELS)
    assert {"validate_ms", "extract_ms", "enrich_ms", "total_ms"} <= set(report.timings_ms)


@pytest.mark.asyncio
async def test_skip_enrichment_returns_base_records():
    gateway = ramen_gateway()
    dishes = await MenuAnalysisPipeline(gateway).analyze(["img1", "img2"], skip_enrichment=True)

    assert len(dishes) == 3
    assert all(d.pronunciation == d.original_name for d in dishes)
    assert all(d.allergens == "" for d in dishes)
    assert "pronounce" not in gateway.kinds()
    assert "allergens" not in gateway.kinds()


@pytest.mark.asyncio
async def test_failing_image_is_skipped(transport_error):
    gateway = ramen_gateway(extract={"img1": transport_error, "img2": dishes_reply("Tonkotsu Ramen")})
    report = await MenuAnalysisPipeline(gateway).run(["img1", "img2"])

    assert [(d.original_name, d.page) for d in report.dishes] == [("Tonkotsu Ramen", 2)]
    assert [s.page for s in report.skipped] == [1]


@pytest.mark.asyncio
async def test_unparsable_image_contributes_placeholder():
    gateway = ramen_gateway(extract={"img1": "no idea", "img2": dishes_reply("Gyoza")})
    dishes = await MenuAnalysisPipeline(gateway).analyze(["img1", "img2"], skip_enrichment=True)
    assert [(d.original_name, d.page) for d in dishes] == [(PLACEHOLDER_NAME, 1), ("Gyoza", 2)]


@pytest.mark.asyncio
async def test_no_dishes_extracted(transport_error):
    gateway = FakeGateway(validate="YES", extract={"img1": "[]", "img2": transport_error})
    with pytest.raises(NoDishesExtractedError) as exc_info:
        await MenuAnalysisPipeline(gateway).run(["img1", "img2"])
    assert exc_info.value.status_code == 422
    assert exc_info.value.details == {"skipped_pages": [2]}


@pytest.mark.asyncio
async def test_validation_errors_fail_open(transport_error):
    gateway = ramen_gateway(validate=transport_error)
    dishes = await MenuAnalysisPipeline(gateway).analyze(["img1", "img2"])
    assert len(dishes) == 3
    assert "extract" in gateway.kinds()


@pytest.mark.asyncio
async def test_enrichment_failures_degrade_to_defaults(transport_error):
    gateway = ramen_gateway(pronounce=transport_error, allergens="garbage")
    dishes = await MenuAnalysisPipeline(gateway).analyze(["img1"])
    assert [(d.pronunciation, d.allergens) for d in dishes] == [
        ("Tonkotsu Ramen", ""),
        ("Gyoza", ""),
    ]
