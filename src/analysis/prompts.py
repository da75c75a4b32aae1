"""
Analysis Prompts.

The base legal-analysis prompt, the emphasis modifiers that bias it toward
recall or precision, and the per-pass prefixes that push independent passes
toward different analytical angles.

Prefix selection is a pure function of (pass index, total passes, seed,
timestamp); the orchestrator supplies the entropy.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from app.config import AnalysisEmphasis

# ============================================================================
# Base prompt
# ============================================================================

DEFAULT_PROMPT = """You are an expert legal analyst AI. Your task is to meticulously review the entirety of the provided legal case file, which includes the case summary, witness statements, and all associated documents. Your goal is to identify factual inconsistencies, contradictions, and discrepancies among these sources.

**IMPORTANT: Focus ONLY on objective factual conflicts. Do NOT flag different perspectives, opinions, or legitimate stakeholder disagreements as inconsistencies.**

## What IS an Inconsistency (Flag These):

1. **Date and Time Conflicts**: Specific dates or times reported differently across sources (e.g., "Police report says accident at 3:00 PM, witness testimony claims 3:30 PM").
2. **Numerical Discrepancies**: Conflicting specific numbers (e.g., "Witness states dinner cost $50, receipt shows $55").
3. **Geographical Conflicts**: Different specific locations for the same event.
4. **Name/Identity Errors**: Misspellings or wrong names for the same person or entity.
5. **Physical Description Conflicts**: Contradictory descriptions of the same object or person.
6. **Timeline Contradictions**: Impossible sequences of events.
7. **Logical Impossibilities**: Physically impossible claims.
8. **Documentary vs. Testimony Conflicts**: Documents contradicting witness recollections of the same specific facts.

## What is NOT an Inconsistency (Do NOT Flag These):

- Different perspectives, opinions, priorities or strategies of the parties
- Natural conflicts of interest between parties with different roles
- Subjective assessments of the same objective facts
- One source simply having more detail than another

## Output Requirements:

In the "Nature of Inconsistency" column, be extremely specific, e.g. "Date conflict: Receipt dated June 22, testimony claims June 24".

Present your findings in a single Markdown table with these three columns:

- **Sources of Conflict**: List only the document names (e.g., "Hotel Receipt #4721", "Jane Doe's Testimony").
- **Nature of Inconsistency**: An explicit description of exactly what conflicts.
- **Recommended Fix**: Which document to modify, the current text, the corrected text and why. Format as: "**[Document Name]**: Change '[current text]' to '[corrected text]' to match [authoritative source] because [reason]."

| Sources of Conflict | Nature of Inconsistency | Recommended Fix |
|---|---|---|
| 1. Hotel Receipt #4721<br>2. Jane Doe's Testimony | Check-in date conflict: Receipt dated June 22, 2024, testimony states June 24, 2024 | **Jane Doe's Testimony**: Change 'June 24, 2024' to 'June 22, 2024' to match Hotel Receipt #4721 because official hotel documentation is more reliable than witness recollection. |

Now, please analyze the following legal case file and generate a comprehensive table of all FACTUAL inconsistencies you find.

[CASE FILE CONTENT FOLLOWS]
"""


# ============================================================================
# Emphasis
# ============================================================================

EMPHASIS_INSTRUCTIONS: dict[AnalysisEmphasis, str] = {
    AnalysisEmphasis.AVOID_FALSE_NEGATIVES: """

**EMPHASIS: COMPREHENSIVE DETECTION (Avoid Missing Issues)**

Err on the side of flagging potential inconsistencies. Ambiguous situations, minor discrepancies, imprecise information and incomplete but suggestive evidence should all be **FLAGGED AS INCONSISTENCIES** with an explanation of why they warrant investigation. Use qualifying language like "potential inconsistency" or "requires clarification" for borderline cases, but still include them in your findings table.""",
    AnalysisEmphasis.NEUTRAL: """

**EMPHASIS: BALANCED APPROACH**

Apply standard consistency checking practices. Flag clear inconsistencies while using reasonable judgment for ambiguous cases. Consider context and allow for minor variations that don't affect the core facts of the case.""",
    AnalysisEmphasis.AVOID_FALSE_POSITIVES: """

**EMPHASIS: HIGH CONFIDENCE DETECTION (Avoid False Alarms)**

Only flag clear, unambiguous inconsistencies. Differences of perspective, rounding or approximation, terminology variations and missing details that do not directly contradict stated facts should **NOT BE FLAGGED**. Require a high standard of evidence before declaring something inconsistent. When in doubt, do not flag it.""",
}

EMPHASIS_DESCRIPTIONS: dict[AnalysisEmphasis, str] = {
    AnalysisEmphasis.AVOID_FALSE_NEGATIVES: (
        "The AI will be more sensitive and flag potential issues even when there "
        "might be innocent explanations. Fewer misses, more items to dismiss on review."
    ),
    AnalysisEmphasis.NEUTRAL: (
        "The AI will use balanced judgment, flagging clear inconsistencies while "
        "considering context and allowing for reasonable variations."
    ),
    AnalysisEmphasis.AVOID_FALSE_POSITIVES: (
        "The AI will only flag very clear, unambiguous inconsistencies. Fewer false "
        "alarms, but subtle inconsistencies may be missed."
    ),
}


def add_emphasis_to_prompt(base_prompt: str, emphasis: AnalysisEmphasis | str) -> str:
    """Append the emphasis instructions to a base prompt."""
    return base_prompt + EMPHASIS_INSTRUCTIONS[AnalysisEmphasis(emphasis)]


def get_emphasis_description(emphasis: AnalysisEmphasis | str) -> str:
    return EMPHASIS_DESCRIPTIONS[AnalysisEmphasis(emphasis)]


# ============================================================================
# Per-pass prefixes
# ============================================================================

FOCUS_AREAS = (
    "temporal and chronological inconsistencies",
    "numerical discrepancies and quantitative conflicts",
    "geographical and locational contradictions",
    "participant names, identities, and personal details",
    "documentary evidence and citation conflicts",
    "financial amounts, payments, and monetary inconsistencies",
    "procedural and process-related contradictions",
    "communication records and correspondence conflicts",
)

ANALYSIS_STRATEGIES = (
    "Start with the most recent documents and trace backwards chronologically",
    "Begin with official documents (contracts, reports) then compare with testimonies",
    "Focus on witness statements first, then verify against documentary evidence",
    "Examine financial records initially, then cross-reference with other sources",
    "Start with the longest, most detailed document and use it as a baseline",
    "Begin with documents that mention specific dates, times, or numbers",
    "Prioritize documents with the most participants or stakeholders mentioned",
    "Start with the shortest documents to identify key conflict areas quickly",
)

REASONING_APPROACHES = (
    "Use systematic fact-checking methodology",
    "Apply forensic accounting principles to financial discrepancies",
    "Employ timeline reconstruction techniques",
    "Use cross-reference validation methods",
    "Apply legal document analysis standards",
    "Use investigative journalism fact-verification approaches",
    "Apply academic research verification protocols",
    "Use auditing and compliance checking methodologies",
)

ATTENTION_DIRECTIVES = (
    "Pay special attention to subtle wording differences that might indicate conflicts",
    "Focus particularly on implied information versus explicitly stated facts",
    "Examine metadata, dates, and contextual clues for hidden inconsistencies",
    "Look for patterns of systematic inconsistency across multiple documents",
    "Consider whether apparent agreements might mask underlying contradictions",
    "Analyze the reliability and potential bias of each information source",
    "Examine the logical consistency of cause-and-effect relationships",
    "Focus on quantifiable facts that can be objectively verified or contradicted",
)


class PassPrefix(BaseModel):
    """The randomized instruction prefix of one pass."""

    model_config = ConfigDict(frozen=True)

    pass_index: int = Field(..., ge=1)
    total_passes: int = Field(..., ge=1)
    seed: int = Field(..., ge=0)
    timestamp: int = Field(..., ge=0)
    focus_area: str
    strategy: str
    reasoning: str
    attention: str

    @property
    def variation_id(self) -> str:
        return f"{self.timestamp}-{self.seed}-P{self.pass_index}"

    @property
    def text(self) -> str:
        return f"""ANALYSIS VARIATION ID: {self.variation_id}

PASS {self.pass_index} OF {self.total_passes} - INDEPENDENT ANALYTICAL APPROACH:

PRIMARY FOCUS: Concentrate specifically on {self.focus_area}.

ANALYSIS STRATEGY: {self.strategy}

REASONING METHODOLOGY: {self.reasoning}

ATTENTION DIRECTIVE: {self.attention}

CRITICAL INDEPENDENCE REQUIREMENT: This is a completely independent analysis. Do not reference, assume, or build upon any previous analyses. Use fresh eyes and a different analytical lens. Approach this as if you've never seen these documents before.

ANALYTICAL DIVERSITY MANDATE: Employ a distinctly different reasoning pattern from what a previous analyst might have used. Question assumptions that might seem obvious. Look for inconsistencies that could be missed by conventional analysis approaches.

"""


def build_pass_prefix(pass_index: int, total_passes: int, seed: int, timestamp: int) -> PassPrefix:
    """
    Pick the focus, strategy, reasoning and attention options for a pass.

    Different multipliers per list make distinct passes very likely, but
    not certain, to land on different combinations.

    Args:
        pass_index: 1-based pass number
        total_passes: Passes in the run
        seed: Random draw shared by the run's passes
        timestamp: Milliseconds since epoch, only used in the variation id

    Returns:
        PassPrefix with the selected options
    """
    return PassPrefix(
        pass_index=pass_index,
        total_passes=total_passes,
        seed=seed,
        timestamp=timestamp,
        focus_area=FOCUS_AREAS[(pass_index + seed) % len(FOCUS_AREAS)],
        strategy=ANALYSIS_STRATEGIES[(pass_index * 3 + seed) % len(ANALYSIS_STRATEGIES)],
        reasoning=REASONING_APPROACHES[(pass_index * 7 + seed) % len(REASONING_APPROACHES)],
        attention=ATTENTION_DIRECTIVES[(pass_index * 11 + seed) % len(ATTENTION_DIRECTIVES)],
    )


# ============================================================================
# Case file
# ============================================================================

def build_case_file(documents: Iterable[tuple[str, str]]) -> str:
    """Join (name, text) documents into one case file for the prompt."""
    return "".join(
        f"=== Document: {name} ===\n{text}\n\n" for name, text in documents
    )


def build_user_message(prompt: str, content: str) -> str:
    return f"{prompt}\n\n{content}"
