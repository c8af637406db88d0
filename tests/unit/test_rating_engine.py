"""
Tests for the outfit rating engine.

Expected values are worked out by hand against the packaged tables:
weights 0.35 color / 0.25 pattern / 0.40 type.
"""

import random

import pytest

from scoring.garments import OutfitSelection
from scoring.rating_engine import SEASON_MISMATCH, RatingEngine, apply_pattern_interaction
from scoring.results import EMPTY_OUTFIT_MESSAGE
from scoring.tables import CompatibilityTables, PatternInteraction


def _basic_outfit(make_garment, top_kwargs=None, bottom_kwargs=None) -> OutfitSelection:
    """Black T-shirt + black jeans: pair score 7.4 before adjustments."""
    top = make_garment("top", "T-shirt", "Black", **(top_kwargs or {}))
    bottom = make_garment("bottom", "Jeans", "Black", **(bottom_kwargs or {}))
    return OutfitSelection(top=top, bottom=bottom)


# =============================================================================
# Degenerate outfits
# =============================================================================

class TestDegenerateOutfits:

    def test_empty_outfit(self, engine):
        result = engine.rate(OutfitSelection())

        assert result.score == 0.0
        assert result.feedback == [EMPTY_OUTFIT_MESSAGE]
        assert result.strengths == []
        assert result.suggestions == []
        assert result.pair_scores == []
        assert result.problematic_items == []

    def test_single_garment_uses_neutral_averages(self, engine, make_garment):
        result = engine.rate(OutfitSelection(top=make_garment()))

        assert result.pair_scores == []
        assert result.color_score == 5.0
        assert result.pattern_score == 5.0
        assert result.type_score == 5.0
        assert result.score == 5.0
        assert result.feedback == ["This combination could use some improvements"]

    def test_single_garment_formality_ignored(self, engine, make_garment):
        result = engine.rate(OutfitSelection(top=make_garment(formality_level=2)))
        assert result.formality_bonus == 0.0


# =============================================================================
# Pair scoring
# =============================================================================

class TestPairScoring:

    def test_black_tshirt_black_jeans(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"formality_level": 1},
            bottom_kwargs={"formality_level": 1},
        )
        result = engine.rate(outfit)

        assert result.color_score == 4.0
        assert result.pattern_score == 8.0
        assert result.type_score == 10.0
        assert result.formality_bonus == 1.0
        assert result.score == 8.4
        assert result.feedback == [
            "T-shirt and Jeans work well together",
            "Excellent formality consistency across the outfit",
            "Good outfit - these pieces work well together",
        ]
        assert result.strengths == []
        assert result.suggestions == []

    def test_excellent_pair_is_a_strength(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "Shirt", "White"),
            bottom=make_garment("bottom", "Jeans", "Black"),
        )
        result = engine.rate(outfit)

        # 0.35*10 + 0.25*8 + 0.40*9
        assert result.pair_scores[0].pair_score == pytest.approx(9.1)
        assert result.strengths == ["Shirt and Jeans pair excellently"]
        assert result.score == 9.1
        assert result.feedback[-1] == "Excellent outfit!"

    def test_score_clamped_to_ten(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "Shirt", "White", formality_level=3),
            bottom=make_garment("bottom", "Jeans", "Black", formality_level=3),
        )
        result = engine.rate(outfit)

        assert result.matrix_score == 10.1
        assert result.score == 10.0

    def test_weak_pair_is_a_suggestion(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black"),
            bottom=make_garment("bottom", "Dress", "Black"),
        )
        result = engine.rate(outfit)

        # 0.35*4 + 0.25*8 + 0.40*2 = 4.2
        assert result.pair_scores[0].pair_score == pytest.approx(4.2)
        assert result.suggestions == [
            "T-shirt and Dress don't match well - consider swapping one"
        ]

    def test_pair_of_exactly_five_is_not_a_suggestion(self, make_garment):
        tables = CompatibilityTables.from_dict({
            "version": "test-boundary",
            "neutral_score": 5,
            "colors": {"Black": {"Blue": 7}},
            "types": {"T-shirt": {"Dress": 2}},
            "patterns": {"Solid": {"Solid": 7}},
        })
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black"),
            bottom=make_garment("bottom", "Dress", "Blue"),
        )
        result = RatingEngine(tables).rate(outfit)

        # 0.35*7 + 0.25*7 + 0.40*2 sums to 4.999999999999999 in floats
        assert result.pair_scores[0].pair_score == 5.0
        assert result.suggestions == []
        assert result.problematic_items == []

    def test_pairs_cover_every_combination(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt"),
            bottom=make_garment("bottom", "Jeans"),
            footwear=make_garment("footwear", "Sneakers"),
            outerwear=make_garment("outerwear", "Jacket"),
            accessories=(make_garment("accessory", "Hat"),),
        )
        result = engine.rate(outfit)

        assert len(result.pair_scores) == 10
        assert [(p.first_index, p.second_index) for p in result.pair_scores][:4] == [
            (0, 1), (0, 2), (0, 3), (0, 4),
        ]

    def test_score_pair_symmetric(self, engine, make_garment):
        a = make_garment("top", "Shirt", "Red", secondary_colors=("Navy", "Yellow"), pattern="Plaid")
        b = make_garment("bottom", "Skirt", "Beige", secondary_colors=("Green",))

        ab = engine.score_pair(a, b)
        ba = engine.score_pair(b, a)

        assert ab.pair_score == ba.pair_score
        assert ab.color_score == ba.color_score

    def test_unknown_labels_score_neutral(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "Cape", "Chartreuse", pattern="Tie-dye"),
            bottom=make_garment("bottom", "Kilt", "Mauve", pattern="Tie-dye"),
        )
        result = engine.rate(outfit)

        pair = result.pair_scores[0]
        assert pair.pattern_score == 5.0
        assert pair.type_score == 5.0
        # both patterned and below the clash threshold
        assert pair.color_score == pytest.approx(4.5)
        assert 0.0 <= result.score <= 10.0


# =============================================================================
# Pattern interaction
# =============================================================================

class TestPatternInteraction:

    def test_one_patterned_piece_softens_clash(self, engine, make_garment):
        outfit = _basic_outfit(make_garment, top_kwargs={"pattern": "Striped"})
        pair = engine.rate(outfit).pair_scores[0]

        assert pair.color_score == pytest.approx(5.2)
        assert pair.pattern_score == 9.0

    def test_two_patterned_pieces_worsen_clash(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"pattern": "Striped"},
            bottom_kwargs={"pattern": "Striped"},
        )
        pair = engine.rate(outfit).pair_scores[0]

        assert pair.color_score == pytest.approx(3.6)
        assert pair.pattern_score == 4.0

    def test_good_colors_left_alone(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", pattern="Striped"),
            bottom=make_garment("bottom", "Jeans", "White"),
        )
        assert engine.rate(outfit).pair_scores[0].color_score == 10.0

    def test_rule_function(self):
        rules = PatternInteraction()

        assert apply_pattern_interaction(4.0, False, False, rules) == 4.0
        assert apply_pattern_interaction(4.0, True, False, rules) == pytest.approx(5.2)
        assert apply_pattern_interaction(4.0, False, True, rules) == pytest.approx(5.2)
        assert apply_pattern_interaction(4.0, True, True, rules) == pytest.approx(3.6)
        assert apply_pattern_interaction(7.0, True, True, rules) == 7.0


# =============================================================================
# Formality
# =============================================================================

class TestFormality:

    @pytest.mark.parametrize("levels,bonus", [
        ((2, 2), 1.0),
        ((2, 2.5), 1.0),
        ((1, 2), 0.0),
        ((1, 2.5), -0.2),
        ((1, 5), -0.5),
    ])
    def test_variance_buckets(self, engine, make_garment, levels, bonus):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"formality_level": levels[0]},
            bottom_kwargs={"formality_level": levels[1]},
        )
        assert engine.rate(outfit).formality_bonus == bonus

    @pytest.mark.parametrize("levels,bonus", [
        ((1, 1, 1), 1.0),
        ((1, 3, 5), -0.5),
    ])
    def test_three_garment_spread(self, engine, make_garment, levels, bonus):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", formality_level=levels[0]),
            bottom=make_garment("bottom", "Jeans", "Black", formality_level=levels[1]),
            footwear=make_garment("footwear", "Sneakers", "Black", formality_level=levels[2]),
        )
        assert engine.rate(outfit).formality_bonus == bonus

    def test_three_garment_outliers(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", formality_level=1),
            bottom=make_garment("bottom", "Jeans", "Black", formality_level=3),
            footwear=make_garment("footwear", "Sneakers", "Black", formality_level=5),
        )
        items = {item.garment.id: item.reason for item in engine.rate(outfit).problematic_items}

        # Jeans sit on the mean of 3
        assert items == {
            outfit.top.id: "Too casual for outfit",
            outfit.footwear.id: "Too formal for outfit",
        }

    def test_mismatch_is_a_suggestion(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"formality_level": 1},
            bottom_kwargs={"formality_level": 5},
        )
        result = engine.rate(outfit)

        assert "Mix of formal and casual items - try matching formality levels" in result.suggestions
        assert result.score == 6.9

    def test_missing_levels_skipped(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", formality_level=1),
            bottom=make_garment("bottom", "Jeans", "Black"),
            footwear=make_garment("footwear", "Sneakers", "Black", formality_level=1),
        )
        assert engine.rate(outfit).formality_bonus == 1.0

    def test_underwear_exempt(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", formality_level=1),
            bottom=make_garment("bottom", "Jeans", "Black", formality_level=1),
            accessories=(make_garment("accessory", "Underwear", "White", formality_level=5),),
        )
        assert engine.rate(outfit).formality_bonus == 1.0

    def test_outliers_become_problematic_items(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"formality_level": 1},
            bottom_kwargs={"formality_level": 5},
        )
        items = engine.rate(outfit).problematic_items

        assert [i.reason for i in items] == ["Too casual for outfit", "Too formal for outfit"]
        assert items[0].garment is outfit.top
        assert items[0].severity == "medium"
        assert items[0].clash_count == 0


# =============================================================================
# Tags
# =============================================================================

class TestTags:

    def test_shared_occasion_and_style(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"tags": {"work/office", "Classic"}},
            bottom_kwargs={"tags": {"Work/Office", "classic"}},
        )
        result = engine.rate(outfit)

        assert result.tag_bonus == 3.0
        assert "Pieces share the Work/Office occasion" in result.feedback
        assert "Consistent Classic style" in result.feedback
        assert result.score == 10.0

    def test_only_first_shared_occasion_counts(self, engine, make_garment):
        tags = {"Date Night", "Formal Event"}
        outfit = _basic_outfit(
            make_garment, top_kwargs={"tags": tags}, bottom_kwargs={"tags": tags},
        )
        result = engine.rate(outfit)

        assert result.tag_bonus == 2.0
        assert "Pieces share the Formal Event occasion" in result.feedback
        assert not any("Date Night" in f for f in result.feedback)

    def test_tag_on_one_garment_does_not_count(self, engine, make_garment):
        outfit = _basic_outfit(make_garment, top_kwargs={"tags": {"Classic", "classic"}})
        assert engine.rate(outfit).tag_bonus == 0.0

    def test_summer_with_winter_penalised(self, engine, make_garment):
        outfit = _basic_outfit(
            make_garment,
            top_kwargs={"tags": {"Summer"}},
            bottom_kwargs={"tags": {"Cold Weather"}},
        )
        result = engine.rate(outfit)

        assert result.tag_bonus == -1.0
        assert SEASON_MISMATCH in result.suggestions
        assert result.score == 6.4


# =============================================================================
# Problematic items
# =============================================================================

class TestProblematicItems:

    def test_clashing_garment_ranked_first(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black"),
            bottom=make_garment("bottom", "Jeans", "Black"),
            footwear=make_garment("footwear", "Sandals", "Black"),
            outerwear=make_garment("outerwear", "Hoodie", "Black"),
        )
        items = engine.rate(outfit).problematic_items

        # only T-shirt/Hoodie clashes; the hoodie has the lower average
        assert [i.garment.garment_type for i in items] == ["Hoodie", "T-shirt"]
        assert items[0].reason == "Clashes with T-shirt"
        assert items[0].clash_count == 1
        assert items[0].severity == "medium"
        assert items[0].potential_improvement == 1.3

    def test_very_low_pair_is_high_severity(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "T-shirt", "Black", pattern="Striped"),
            bottom=make_garment("bottom", "Dress", "Black", pattern="Striped"),
        )
        items = engine.rate(outfit).problematic_items

        assert len(items) == 2
        assert all(i.severity == "high" for i in items)
        assert items[0].potential_improvement == 1.8

    def test_no_issues_no_items(self, engine, make_garment):
        assert engine.rate(_basic_outfit(make_garment)).problematic_items == []


# =============================================================================
# Properties
# =============================================================================

class TestProperties:

    def test_deterministic(self, engine, make_garment):
        outfit = OutfitSelection(
            top=make_garment("top", "Shirt", "Navy", tags={"Classic"}, formality_level=4),
            bottom=make_garment("bottom", "Pants", "Beige", tags={"Classic"}, formality_level=4),
            footwear=make_garment("footwear", "Shoes", "Brown", pattern="Solid"),
        )
        assert engine.rate(outfit) == engine.rate(outfit)

    def test_score_always_in_range(self, engine, tables, make_garment):
        rng = random.Random(11)
        colors = list(tables.colors.labels) + ["Chartreuse"]
        types = list(tables.types.labels) + ["Cape"]
        patterns = list(tables.patterns.labels) + ["Tie-dye"]
        tags = ["Summer", "Winter", "Classic", "Work/Office", "Trendy"]

        def garment(category):
            return make_garment(
                category,
                rng.choice(types),
                rng.choice(colors),
                secondary_colors=tuple(rng.sample(colors, k=rng.randint(0, 2))),
                pattern=rng.choice(patterns),
                formality_level=rng.choice([None, 1, 2, 3, 4, 5]),
                tags=set(rng.sample(tags, k=rng.randint(0, 3))),
            )

        for _ in range(200):
            outfit = OutfitSelection(
                top=garment("top"),
                bottom=garment("bottom") if rng.random() < 0.8 else None,
                footwear=garment("footwear") if rng.random() < 0.8 else None,
                accessories=tuple(garment("accessory") for _ in range(rng.randint(0, 2))),
            )
            result = engine.rate(outfit)
            assert result.score == round(result.score, 1)
            for value in (result.score, result.color_score, result.pattern_score, result.type_score):
                assert 0.0 <= value <= 10.0
            for pair in result.pair_scores:
                for value in (pair.color_score, pair.pattern_score, pair.type_score, pair.pair_score):
                    assert 0.0 <= value <= 10.0
