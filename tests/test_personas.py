"""Tests for persona_debate/personas.py."""

from dataclasses import replace

import pytest

from persona_debate.models import PoliticalLeaning
from persona_debate.personas import BUILTIN_PERSONAS, PersonaCatalog, catalog


def test_catalog_has_four_builtin_personas():
    assert len(catalog) == 4
    assert catalog.ids() == [
        "liberal_grassroots",
        "liberal_expert",
        "conservative_patriot",
        "conservative_expert",
    ]


def test_two_personas_per_leaning():
    assert len(catalog.personas_by_leaning(PoliticalLeaning.LIBERAL)) == 2
    assert len(catalog.personas_by_leaning(PoliticalLeaning.CONSERVATIVE)) == 2


def test_get_persona_case_insensitive():
    assert catalog.get_persona("LIBERAL_EXPERT") is catalog.get_persona("liberal_expert")
    assert catalog.get_persona(" Conservative_Expert ").character_name == "Michael Sterling"


def test_get_persona_unknown_returns_none():
    assert catalog.get_persona("libertarian") is None
    assert "libertarian" not in catalog
    assert "liberal_expert" in catalog


def test_validate_pair_opposing_sides():
    assert catalog.validate_pair("liberal_expert", "conservative_expert") is True
    assert catalog.validate_pair("liberal_grassroots", "conservative_expert") is True


def test_validate_pair_same_side_rejected():
    assert catalog.validate_pair("liberal_expert", "liberal_grassroots") is False
    assert catalog.validate_pair("conservative_patriot", "conservative_expert") is False


def test_validate_pair_self_rejected():
    assert catalog.validate_pair("liberal_expert", "liberal_expert") is False


def test_validate_pair_unknown_id_rejected():
    assert catalog.validate_pair("liberal_expert", "nobody") is False
    assert catalog.validate_pair("nobody", "conservative_expert") is False


def test_validate_pair_symmetric_for_all_ids():
    ids = catalog.ids() + ["unknown"]
    for a in ids:
        for b in ids:
            assert catalog.validate_pair(a, b) == catalog.validate_pair(b, a)


def test_valid_combinations_cross_leaning_only():
    combos = catalog.get_valid_combinations()
    # 2 liberals x 2 conservatives
    assert len(combos) == 4
    for combo in combos:
        assert combo.persona1.leaning is not combo.persona2.leaning
        assert combo.matchup == f"{combo.persona1.leaning.value} vs {combo.persona2.leaning.value}"


def test_valid_combinations_no_reverse_duplicates():
    pairs = [frozenset((c.persona1.persona_id, c.persona2.persona_id)) for c in catalog.get_valid_combinations()]
    assert len(pairs) == len(set(pairs))


def test_valid_combinations_ids_and_display_names():
    combo = catalog.get_valid_combinations()[0]
    assert combo.id == "liberal_grassroots_vs_conservative_patriot"
    assert combo.display_name == f"{combo.persona1.display_name} vs {combo.persona2.display_name}"


def test_valid_combinations_match_validate_pair():
    valid = {(c.persona1.persona_id, c.persona2.persona_id) for c in catalog.get_valid_combinations()}
    ids = catalog.ids()
    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            assert ((a, b) in valid) == catalog.validate_pair(a, b)


def test_display_info_omits_system_prompt():
    for info in catalog.get_display_info():
        assert "systemPrompt" not in info
        assert "system_prompt" not in info
        assert set(info) >= {"id", "displayName", "politicalLeaning", "expertiseLevel", "keyInfluences"}


def test_display_info_truncates_influences():
    for persona, info in zip(catalog.all_personas(), catalog.get_display_info()):
        assert len(persona.key_influences) > 3
        assert info["keyInfluences"] == list(persona.key_influences[:3])


def test_every_persona_has_voice_material():
    for persona in catalog.all_personas():
        assert persona.system_prompt
        assert len(persona.signature_phrases) >= 2
        assert persona.preferred_sources


def test_duplicate_ids_rejected():
    duplicate = replace(BUILTIN_PERSONAS[0], persona_id="LIBERAL_GRASSROOTS")
    with pytest.raises(ValueError, match="Duplicate persona id"):
        PersonaCatalog([*BUILTIN_PERSONAS, duplicate])


def test_custom_catalog_with_single_side_has_no_combinations():
    liberals = [p for p in BUILTIN_PERSONAS if p.leaning is PoliticalLeaning.LIBERAL]
    custom = PersonaCatalog(liberals)
    assert len(custom) == 2
    assert custom.get_valid_combinations() == []
