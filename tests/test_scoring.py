import pytest

from jb_reco.config import Answers, CatalogItem
from jb_reco.mapping import format_price, make_badge, to_view_item
from jb_reco.normalize import price_band
from jb_reco.scoring import occasion_pattern, rank_items, recommend, score_product


def make_item(handle="p1", title="Parfum", brand="Maison", gender="unisex", price=30.0, **kw):
    return CatalogItem(
        id=f"gid://shopify/Product/{handle}",
        handle=handle,
        title=title,
        brand=brand,
        gender=gender,
        price=price,
        price_band=price_band(price),
        image=f"https://shop.example.com/img/{handle}.jpg",
        url=f"https://shop.example.com/products/{handle}",
        variant_id=f"gid://shopify/ProductVariant/{handle}",
        **kw,
    )


FULL_ANSWERS = Answers(
    gender="Femme",
    profile="Floral",
    intensity="Marquée",
    occasion="Mariage",
    budget="25–40€",
    format="Eau de parfum",
    sensitivity="Oui",
)


def test_empty_answers_score_zero():
    items = [
        make_item("a", title="Rose intense eau de parfum", gender="femme"),
        make_item("b", title="Huile musc", gender="homme", price=90),
    ]
    for it in items:
        assert score_product(it, Answers()) == 0


@pytest.mark.parametrize(
    "answers,item_kwargs,expected",
    [
        (Answers(gender="Femme"), {"gender": "femme"}, 2),
        (Answers(gender="Homme"), {"gender": "femme"}, 0),
        (Answers(gender="Mixte"), {"gender": "unisex"}, 2),
        (Answers(profile="Floral"), {"title": "Bouquet floral"}, 3),
        (Answers(profile="Boisé/Ambré"), {"notes_base": ["Oud", "Santal"]}, 3),
        (Answers(profile="Frais/Agrumes"), {"notes_top": ["Bergamote"]}, 3),
        (Answers(intensity="Douce"), {"title": "Voile léger"}, 1),
        (Answers(intensity="Modérée"), {"title": "Sillage modere"}, 1),
        (Answers(intensity="Marquée"), {"title": "Oud Puissant"}, 1),
        (Answers(occasion="Mariage, Soirée"), {"title": "Parfum evenement"}, 1),
        (Answers(occasion="Tous les jours"), {"title": "Daily musk"}, 1),
        (Answers(occasion="Bureau"), {"title": "Parfum de bureau"}, 1),
        (Answers(budget="25–40€"), {"price": 40.0}, 2),
        (Answers(budget="+60€"), {"price": 40.0}, 0),
        (Answers(format="Huile parfumée"), {"title": "Musc blanc"}, 2),
        (Answers(format="Eau de parfum"), {"title": "Rose EDP"}, 1),
        (Answers(sensitivity="Oui"), {"title": "Ambre intense"}, -1),
        (Answers(sensitivity="Non"), {"title": "Ambre intense"}, 0),
    ],
)
def test_individual_signals(answers, item_kwargs, expected):
    assert score_product(make_item(**item_kwargs), answers) == expected


def test_unknown_answer_values_are_no_ops():
    item = make_item(title="Floral fort huile")
    answers = Answers(profile="Aquatique", intensity="Extrême", budget="cher", format="Spray")
    assert score_product(item, answers) == 0


def test_profile_match_keeps_diacritics():
    # "épicé" does not match the unaccented "epic" pattern
    assert score_product(make_item(title="Accord épicé"), Answers(profile="Épicé")) == 0
    assert score_product(make_item(title="Poivre rose"), Answers(profile="Épicé")) == 3


def test_occasion_literal_is_escaped():
    assert occasion_pattern("Soirée (été)").search("parfum soirée (été)")
    assert occasion_pattern("Mariage").pattern.startswith("mariage")


def test_all_signals_add_up():
    item = make_item(
        title="Rose floral intense mariage eau de parfum",
        gender="femme",
        price=35.0,
    )
    # 2 + 3 + 1 + 1 + 2 + 1 - 1
    assert score_product(item, FULL_ANSWERS) == 9


def test_adding_a_matching_signal_never_decreases_score():
    item = make_item(title="Rose floral eau de parfum", gender="femme", price=35.0)
    base = Answers()
    previous = score_product(item, base)
    for field, value in [
        ("gender", "Femme"),
        ("profile", "Floral"),
        ("budget", "25–40€"),
        ("format", "Eau de parfum"),
    ]:
        base = base.model_copy(update={field: value})
        current = score_product(item, base)
        assert current >= previous
        previous = current


def test_rank_is_descending_and_stable():
    items = [
        make_item("a", title="Cuir"),
        make_item("b", title="Rose floral"),
        make_item("c", title="Tabac"),
        make_item("d", title="Pivoine floral"),
    ]
    ranked = rank_items(items, Answers(profile="Floral"), limit=None)
    assert [r.item.handle for r in ranked] == ["b", "d", "a", "c"]
    assert [r.score for r in ranked] == [3, 3, 0, 0]


def test_recommend_limits_and_keeps_non_positive_scores():
    items = [make_item(f"p{i}", title="Ambre intense") for i in range(7)]
    response = recommend(items, Answers(sensitivity="Oui"))
    assert len(response.items) == 5
    assert [v.url for v in response.items] == [it.url for it in items[:5]]

    small = recommend(items[:2], Answers(sensitivity="Oui"))
    assert len(small.items) == 2


def test_recommend_empty_catalog():
    assert recommend([], FULL_ANSWERS).items == []


def test_view_model():
    item = make_item("x", title="Oud Royal", brand="Maison", gender="homme", price=42.5)
    view = to_view_item(item)
    assert view.price == "42.50 €"
    assert view.badge == "Maison • homme"
    assert view.variant_id == "gid://shopify/ProductVariant/x"
    dumped = view.model_dump(by_alias=True)
    assert set(dumped) == {"title", "url", "image", "price", "badge", "variantId"}


def test_badge_skips_empty_brand():
    assert make_badge(make_item(brand="", gender="femme")) == "femme"
    assert format_price(0, "$") == "0.00 $"
