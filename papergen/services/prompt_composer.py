"""
Prompt composition for document generation.

``compose(user_text, config)`` is pure and stateless: it never looks at past
model output, so the same inputs always give a byte-identical payload. All
directive text lives in module-level constants so it can be tuned without
touching logic code.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from papergen.models.schemas import (
    Author,
    GenerationConfig,
    ReferenceStyle,
    TargetLength,
    TemplateKind,
    Tone,
)


@dataclass(frozen=True)
class PromptPayload:
    """System directive plus user content for one generation call."""

    system_instruction: str
    user_content: str


# ---------------------------------------------------------------------------
# Directive templates
# ---------------------------------------------------------------------------

_PREAMBLE = """\
You are an expert academic paper formatter.
Generate a COMPLETE, styled HTML document.\
"""

_CAPTION_RULES = """\
MANDATORY PROJECT GUIDELINES:
1. Figure Placement: the descriptive caption goes UNDERNEATH the figure (e.g. "Figure 1: Block Diagram").
2. Table Placement: the caption goes ABOVE the table (e.g. "Table 1: Cost Breakdown").
3. Context: you MUST introduce every figure and table in the text before showing it (e.g. "As shown in Figure 1...").
4. References: ZERO TOLERANCE for fabricated references. Cite only real, verifiable sources; never invent authors, titles, years or DOIs.\
"""

_TEMPLATE_DIRECTIVES: Dict[TemplateKind, str] = {
    TemplateKind.THESIS: """\
Format the output as a professional HTML Thesis Paper.

STRICT FORMATTING RULES (THESIS STRUCTURE):
1. Layout: single column.
2. Font: Times New Roman, size 12.
3. Spacing: line spacing 1.5.
4. Margins: 2.5cm on all sides (simulate with CSS padding).

REQUIRED STRUCTURE (in this order):
1. Abstract: a comprehensive summary of the research aims, methodology, findings and conclusion (approx. 200-300 words).
2. Chapter 1: Introduction - background and context.
3. Chapter 2: Literature Review.
4. Chapter 3: Methodology.
5. Chapter 4: Results - presentation of data.
6. Chapter 5: Discussion - analysis of results.
7. Chapter 6: Conclusion and Recommendations.
8. References.\
""",
    TemplateKind.CONFERENCE: """\
Format the output as a professional HTML Conference Paper.

STRUCTURE INSTRUCTIONS:
1. Layout: STRICT two-column layout for body text (CSS column-count: 2; column-gap: 0.8cm).
2. Title: centered, 24pt Times New Roman, spanning both columns.
3. Authors: centered below the title.
4. Abstract: bold, single column, followed by Keywords.
5. Headings: Roman numerals (I., II., III.) in small caps.
6. Appendices: place technical code or schematics at the end.

REQUIRED STRUCTURE (in this order):
Abstract, Keywords, Introduction, Methodology, Findings, Conclusion, References.\
""",
}

_TONE_DIRECTIVES: Dict[Tone, str] = {
    Tone.ACADEMIC: (
        "Formal, objective and scholarly. Use passive voice where appropriate. "
        "Avoid colloquialisms. Focus on rigor, evidence and precise terminology."
    ),
    Tone.PROFESSIONAL: (
        "Business-like, concise and action-oriented. Clear, direct language "
        "suitable for industry reports and executive summaries."
    ),
    Tone.ESSAY: (
        "Narrative flow with persuasive arguments. Personal voice is allowed "
        "where appropriate. Focus on logical structure and readability."
    ),
    Tone.CREATIVE: (
        "Descriptive, engaging and varied sentence structure. Allows metaphors "
        "and storytelling elements while keeping to the subject matter."
    ),
}

_REFERENCE_DIRECTIVES: Dict[ReferenceStyle, str] = {
    ReferenceStyle.HARVARD: """\
REFERENCING STYLE: Harvard (author-date).
- In-text: (Surname, Year) or Surname (Year); two authors as (Jones and Smith, 2022); three or more as (Jones et al., 2022); add page numbers for quotations (Jones, 2022, p. 14).
- Reference list titled "References", alphabetical by first author's surname, no numbering.
- Entry format: Surname, Initials. (Year) Title. Edition. Place: Publisher. Journal articles: Surname, Initials. (Year) 'Article title', Journal Name, Volume(Issue), pp. x-y.\
""",
    ReferenceStyle.IEEE: """\
REFERENCING STYLE: IEEE (numeric).
- In-text: square-bracket numbers in order of first citation, e.g. [1], [2], [3]-[5]; reuse the same number for repeat citations.
- Reference list titled "References", ordered by citation number, each entry starting with its bracketed number.
- Entry format: [n] Initials. Surname, "Article title," Abbrev. Journal, vol. x, no. x, pp. x-y, Mon. Year. Books: [n] Initials. Surname, Title. City, Country: Publisher, Year.\
""",
}

_PAGE_RANGES: Dict[TargetLength, str] = {
    TargetLength.SHORT: "1-2 pages",
    TargetLength.MEDIUM: "3-5 pages",
    TargetLength.LONG: "6-10 pages",
    TargetLength.EXTRA_LONG: "more than 10 pages",
}

_AUTO_LENGTH = (
    "CONTENT LENGTH: Generate comprehensive content appropriate for the topic, "
    "ensuring all sections are well covered."
)

_TIER_LENGTH = (
    "CONTENT LENGTH: Generate a SUBSTANTIAL amount of detailed text, data, figures "
    "and tables. The output HTML must contain enough content to fill approximately "
    "{pages} when printed. Expand deeply on the Methodology, Literature Review and "
    "Discussion sections to meet this length requirement."
)

_TECHNICAL_CONSTRAINTS = """\
TECHNICAL REQUIREMENTS:
- Return raw HTML only. Do not wrap the answer in Markdown code fences or backticks.
- DO NOT include any <script> tags or JavaScript code.
- DO NOT use event handler attributes (onclick, onload, onerror, ...) or javascript: links.
- Use inline CSS (style attributes or a single <style> block) only.
- Figures and tables: keep captions correctly placed (table caption ABOVE, figure caption BELOW).
- Make it look exactly like a printed paper.

MATHEMATICAL NOTATION:
- Use HTML entities and tags, never LaTeX.
- Variables in italics: <i>x</i> = <i>y</i> + 2.
- Displayed equations in a centered block: <div style="text-align: center; margin: 1em 0;"><i>E</i> = <i>mc</i><sup>2</sup></div>.
- Superscripts with <sup>, subscripts with <sub> (e.g. <i>x</i><sub>1</sub>, <i>a</i><sup>2</sup>).
- Operators: &times; &divide; &asymp; &ne; &le; &ge; &plusmn; &sum; &radic; &infin;.
- Greek letters as entities: &alpha; &beta; &gamma; &delta; &epsilon; &theta; &lambda; &mu; &pi; &sigma; &phi; &omega; &Delta; &Sigma; &Omega;.\
"""

_AUTHORS_GIVEN = (
    "AUTHORSHIP: The user message lists the authors. Reproduce every name, "
    "affiliation and email exactly as given, in the given order. Do not add, "
    "remove or alter authors."
)

_AUTHORS_INVENTED = (
    "AUTHORSHIP: No authors were supplied. Invent plausible author names and "
    "affiliations appropriate to the topic and place them below the title."
)

_CLOSING = "Please generate the full document now, strictly adhering to the guidelines."


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def length_directive(target: TargetLength) -> str:
    if target is TargetLength.AUTO:
        return _AUTO_LENGTH
    return _TIER_LENGTH.format(pages=_PAGE_RANGES[target])


def author_block(authors: List[Author]) -> str:
    """Literal author lines in the order given; empty when there are none."""
    entries: List[str] = []
    for idx, author in enumerate(authors, start=1):
        lines = [f"Author {idx}: {author.name.strip()}"]
        if author.affiliation and author.affiliation.strip():
            lines.append(f"Affiliation: {author.affiliation.strip()}")
        if author.email and author.email.strip():
            lines.append(f"Email: {author.email.strip()}")
        entries.append("\n".join(lines))
    if not entries:
        return ""
    return "AUTHOR INFORMATION (use these exact details in the paper):\n" + "\n\n".join(entries)


def compose(user_text: str, config: GenerationConfig) -> PromptPayload:
    """Build the system directive and user content for one generation call."""
    # Resolved once here; the model never sees "Auto"
    reference_style = config.resolved_reference_style()
    authors = config.named_authors()

    system_blocks = [
        _PREAMBLE,
        _TEMPLATE_DIRECTIVES[config.template],
        _CAPTION_RULES,
        "TONE AND STYLE INSTRUCTION:\n" + _TONE_DIRECTIVES[config.tone],
        _REFERENCE_DIRECTIVES[reference_style],
        length_directive(config.target_length),
        _TECHNICAL_CONSTRAINTS,
        _AUTHORS_GIVEN if authors else _AUTHORS_INVENTED,
    ]

    user_blocks = ["Topic/Content to Process:\n" + user_text]
    block = author_block(authors)
    if block:
        user_blocks.append(block)
    user_blocks.append(_CLOSING)

    return PromptPayload(
        system_instruction="\n\n".join(system_blocks),
        user_content="\n\n".join(user_blocks),
    )
