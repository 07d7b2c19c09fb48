"""Tests for prompt composition."""
import pytest

from papergen.models.schemas import (
    Author,
    GenerationConfig,
    ReferenceStyle,
    TargetLength,
    TemplateKind,
    Tone,
)
from papergen.services.prompt_composer import PromptPayload, author_block, compose


def test_compose_is_deterministic():
    config = GenerationConfig(
        template=TemplateKind.CONFERENCE,
        tone=Tone.CREATIVE,
        target_length=TargetLength.LONG,
        authors=[Author(name="Ada Lovelace", affiliation="Analytical Engines Ltd")],
    )
    first = compose("Solar-powered water pumps", config)
    second = compose("Solar-powered water pumps", config)
    assert first == second
    assert isinstance(first, PromptPayload)


def test_payload_is_immutable():
    payload = compose("x", GenerationConfig())
    with pytest.raises(AttributeError):
        payload.user_content = "changed"


@pytest.mark.parametrize(
    "template, expected",
    [
        (TemplateKind.THESIS, ReferenceStyle.HARVARD),
        (TemplateKind.CONFERENCE, ReferenceStyle.IEEE),
    ],
)
def test_auto_reference_style_resolves_from_template(template, expected):
    config = GenerationConfig(template=template, reference_style=ReferenceStyle.AUTO)
    assert config.resolved_reference_style() is expected


def test_explicit_reference_style_wins():
    config = GenerationConfig(template=TemplateKind.THESIS, reference_style=ReferenceStyle.IEEE)
    assert config.resolved_reference_style() is ReferenceStyle.IEEE
    payload = compose("topic", config)
    assert "REFERENCING STYLE: IEEE" in payload.system_instruction
    assert "Harvard" not in payload.system_instruction


def test_auto_style_never_reaches_the_model():
    payload = compose("topic", GenerationConfig(template=TemplateKind.CONFERENCE))
    assert "REFERENCING STYLE: IEEE (numeric)" in payload.system_instruction
    assert "Auto" not in payload.system_instruction


def test_directive_order():
    payload = compose("topic", GenerationConfig())
    system = payload.system_instruction
    markers = [
        "Thesis Paper",
        "Table Placement",
        "TONE AND STYLE INSTRUCTION",
        "REFERENCING STYLE",
        "CONTENT LENGTH",
        "TECHNICAL REQUIREMENTS",
        "AUTHORSHIP",
    ]
    positions = [system.index(m) for m in markers]
    assert positions == sorted(positions)


def test_template_directives_differ():
    thesis = compose("t", GenerationConfig(template=TemplateKind.THESIS)).system_instruction
    conf = compose("t", GenerationConfig(template=TemplateKind.CONFERENCE)).system_instruction
    assert "Chapter 2: Literature Review" in thesis
    assert "two-column" in conf
    assert "UNDERNEATH the figure" in thesis and "UNDERNEATH the figure" in conf


def test_tone_directive_follows_config():
    payload = compose("t", GenerationConfig(tone=Tone.PROFESSIONAL))
    assert "executive summaries" in payload.system_instruction


def test_auto_length_asks_for_comprehensive_coverage():
    payload = compose("t", GenerationConfig(target_length=TargetLength.AUTO))
    assert "comprehensive content" in payload.system_instruction
    assert "when printed" not in payload.system_instruction


@pytest.mark.parametrize(
    "tier, pages",
    [
        (TargetLength.SHORT, "1-2 pages"),
        (TargetLength.MEDIUM, "3-5 pages"),
        (TargetLength.LONG, "6-10 pages"),
        (TargetLength.EXTRA_LONG, "more than 10 pages"),
    ],
)
def test_length_tiers_name_a_page_range(tier, pages):
    system = compose("t", GenerationConfig(target_length=tier)).system_instruction
    assert f"approximately {pages} when printed" in system
    assert "Methodology, Literature Review and Discussion" in system


def test_technical_constraints_present():
    system = compose("t", GenerationConfig()).system_instruction
    assert "Do not wrap the answer in Markdown code fences" in system
    assert "<script>" in system
    assert "<sup>" in system and "<sub>" in system
    assert "&alpha;" in system


def test_authors_are_reproduced_verbatim():
    config = GenerationConfig(
        authors=[
            Author(name="Grace Hopper", affiliation="US Navy", email="grace@navy.mil"),
            Author(name="Alan Turing"),
        ]
    )
    payload = compose("Compilers", config)
    assert "Author 1: Grace Hopper\nAffiliation: US Navy\nEmail: grace@navy.mil" in payload.user_content
    assert "Author 2: Alan Turing" in payload.user_content
    assert "Reproduce every name" in payload.system_instruction


def test_blank_authors_mean_invented_authorship():
    config = GenerationConfig(authors=[Author(name="   ")])
    payload = compose("Compilers", config)
    assert "AUTHOR INFORMATION" not in payload.user_content
    assert "Invent plausible author names" in payload.system_instruction


def test_user_content_layout():
    config = GenerationConfig(authors=[Author(name="Ada")])
    content = compose("My notes", config).user_content
    assert content.startswith("Topic/Content to Process:\nMy notes")
    assert content.index("My notes") < content.index("AUTHOR INFORMATION")
    assert content.endswith("strictly adhering to the guidelines.")


def test_author_block_empty_without_authors():
    assert author_block([]) == ""
